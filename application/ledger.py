from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, List, Tuple

from domain.errors import InsufficientFunds, InvalidAmount, UnknownUser
from domain.models import Transaction, TransactionKind
from domain.repositories import UserRepository


log = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_positive_amount(amount: int) -> None:
    if amount <= 0:
        raise InvalidAmount("Amount must be greater than zero.")


class Ledger:
    """
    Balances plus the append-only transaction history.

    Every balance change goes through `credit` or `debit` and produces
    exactly one `Transaction`. Both run under one lock so that the
    balance check and the mutation are a single step even when called
    from several threads.
    """

    def __init__(self, user_repo: UserRepository, clock: Clock = utc_now) -> None:
        self._user_repo = user_repo
        self._clock = clock
        self._history: List[Transaction] = []
        self._lock = threading.RLock()

    def credit(self, username: str, amount: int, reference: str = "") -> int:
        validate_positive_amount(amount)
        with self._lock:
            if self._user_repo.get_user(username) is None:
                raise UnknownUser()
            balance = self._user_repo.update_balance(username, amount)
            self._record(username, TransactionKind.CREDIT, amount, reference)
        log.info("Credited %s to %s (%s), balance %s", amount, username, reference, balance)
        return balance

    def debit(self, username: str, amount: int, reference: str = "") -> int:
        validate_positive_amount(amount)
        with self._lock:
            user = self._user_repo.get_user(username)
            if user is None:
                raise UnknownUser()
            if user.balance < amount:
                raise InsufficientFunds(
                    f"Insufficient balance: Rp{user.balance} available, Rp{amount} needed."
                )
            balance = self._user_repo.update_balance(username, -amount)
            self._record(username, TransactionKind.DEBIT, amount, reference)
        log.info("Debited %s from %s (%s), balance %s", amount, username, reference, balance)
        return balance

    def balance_of(self, username: str) -> int:
        user = self._user_repo.get_user(username)
        if user is None:
            raise UnknownUser()
        return user.balance

    def balances(self) -> List[Tuple[str, int]]:
        with self._lock:
            return [(u.username, u.balance) for u in self._user_repo.get_all_users()]

    def history(self) -> Tuple[Transaction, ...]:
        with self._lock:
            return tuple(self._history)

    def _record(
        self,
        username: str,
        kind: TransactionKind,
        amount: int,
        reference: str,
    ) -> None:
        self._history.append(
            Transaction(
                username=username,
                kind=kind,
                amount=amount,
                created_at=self._clock(),
                reference=reference,
            )
        )
