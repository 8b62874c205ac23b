from __future__ import annotations

import logging
from typing import Callable, Dict, List

from application.bridge import BridgeConnector
from application.locks import KeyedLock
from domain.errors import AlreadyLoggedIn, InvalidCredentials, NotLoggedIn
from domain.models import Role, Session, UserAccount
from domain.repositories import AdminRepository, UserRepository


log = logging.getLogger(__name__)

BridgeFactory = Callable[[UserAccount, str], BridgeConnector]


class SessionRegistry:
    """
    Maps chat conversations to logged-in identities.

    A conversation holds at most one session, user or admin. User sessions
    own a `BridgeConnector`, which is opened on login and closed on logout
    or when the registry is shut down. Login and logout for the same
    conversation are serialised with a per-conversation lock.

    Passwords are compared as plain strings.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        admin_repo: AdminRepository,
        bridge_factory: BridgeFactory,
    ) -> None:
        self._user_repo = user_repo
        self._admin_repo = admin_repo
        self._bridge_factory = bridge_factory
        self._sessions: Dict[str, Session] = {}
        self._locks = KeyedLock()

    async def login(
        self,
        conversation_id: str,
        username: str,
        password: str,
        role: Role = Role.USER,
    ) -> Role:
        async with self._locks.hold(conversation_id):
            if role is Role.ADMIN:
                account = self._admin_repo.get_admin(username)
            else:
                account = self._user_repo.get_user(username)

            if account is None or account.password != password:
                log.warning("Rejected %s login for %r from chat %s", role.value, username, conversation_id)
                raise InvalidCredentials()

            if conversation_id in self._sessions:
                raise AlreadyLoggedIn()

            bridge = None
            if role is Role.USER:
                bridge = self._bridge_factory(account, conversation_id)
                try:
                    await bridge.open()
                except Exception:
                    await bridge.close()
                    raise

            self._sessions[conversation_id] = Session(
                conversation_id=conversation_id,
                username=username,
                role=role,
                bridge=bridge,
            )

        log.info("Chat %s logged in as %s %s", conversation_id, role.value, username)
        return role

    async def logout(self, conversation_id: str, role: Role = Role.USER) -> Session:
        async with self._locks.hold(conversation_id):
            session = self._sessions.get(conversation_id)
            if session is None or session.role is not role:
                raise NotLoggedIn()

            del self._sessions[conversation_id]
            if session.bridge is not None:
                await session.bridge.close()

        log.info("Chat %s logged out (%s %s)", conversation_id, session.role.value, session.username)
        return session

    def session_of(self, conversation_id: str) -> Session:
        session = self._sessions.get(conversation_id)
        if session is None:
            raise NotLoggedIn()
        return session

    def require(self, conversation_id: str, role: Role) -> Session:
        """Return the conversation's session if it has the given role."""

        session = self._sessions.get(conversation_id)
        if session is None or session.role is not role:
            if role is Role.ADMIN:
                raise NotLoggedIn("Admin login required.")
            raise NotLoggedIn("Please /login first.")
        return session

    def sessions(self) -> List[Session]:
        return list(self._sessions.values())

    async def aclose(self) -> None:
        """Close every bridge and drop all sessions."""

        sessions, self._sessions = list(self._sessions.values()), {}
        for session in sessions:
            if session.bridge is not None:
                await session.bridge.close()
        log.info("Session registry closed (%d sessions)", len(sessions))
