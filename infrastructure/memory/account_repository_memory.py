from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from domain.models import AdminAccount, UserAccount
from domain.repositories import AdminRepository, UserRepository


class InMemoryUserRepository(UserRepository):
    """
    Process-memory implementation of `UserRepository`.

    Accounts are seeded once at startup; state is lost on restart.
    """

    def __init__(self, users: Iterable[UserAccount] = ()) -> None:
        self._users: Dict[str, UserAccount] = {}
        for user in users:
            self.add_user(user)

    def add_user(self, user: UserAccount) -> None:
        if user.username in self._users:
            raise ValueError(f"Duplicate username: {user.username}")
        self._users[user.username] = user

    def get_user(self, username: str) -> Optional[UserAccount]:
        return self._users.get(username)

    def get_all_users(self) -> List[UserAccount]:
        return list(self._users.values())

    def update_balance(self, username: str, delta: int) -> int:
        user = self._users[username]
        user.balance += delta
        return user.balance


class InMemoryAdminRepository(AdminRepository):
    def __init__(self, admins: Iterable[AdminAccount] = ()) -> None:
        self._admins: Dict[str, AdminAccount] = {a.username: a for a in admins}

    def get_admin(self, username: str) -> Optional[AdminAccount]:
        return self._admins.get(username)

    def get_all_admins(self) -> List[AdminAccount]:
        return list(self._admins.values())
