from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List

from application.ledger import Clock, Ledger, validate_positive_amount, utc_now
from domain.errors import InvalidToken, TokenAlreadyUsed, TokenExpired, UnknownUser
from domain.models import TopUpToken
from domain.repositories import UserRepository


log = logging.getLogger(__name__)

TOKEN_TTL = timedelta(hours=1)
TOKEN_BYTES = 16


@dataclass(frozen=True)
class Redemption:
    """Result of a successful top-up."""

    username: str
    amount: int
    balance: int


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


class TokenService:
    """
    Issues and redeems top-up tokens against a `Ledger`.

    Redemption checks the token state, credits the ledger and flips the
    `used` flag while holding one lock, so a token credits at most once
    no matter how many redemptions race on it.
    """

    def __init__(
        self,
        ledger: Ledger,
        user_repo: UserRepository,
        clock: Clock = utc_now,
        ttl: timedelta = TOKEN_TTL,
    ) -> None:
        self._ledger = ledger
        self._user_repo = user_repo
        self._clock = clock
        self._ttl = ttl
        self._tokens: Dict[str, TopUpToken] = {}
        self._lock = threading.Lock()

    def issue(self, username: str, amount: int) -> str:
        if self._user_repo.get_user(username) is None:
            raise UnknownUser()
        validate_positive_amount(amount)

        with self._lock:
            token = generate_token()
            while token in self._tokens:
                token = generate_token()
            self._tokens[token] = TopUpToken(
                token=token,
                username=username,
                amount=amount,
                created_at=self._clock(),
            )

        log.info("Issued top-up token for %s, amount %s", username, amount)
        return token

    def redeem(self, token: str) -> Redemption:
        with self._lock:
            top_up = self._tokens.get(token)
            if top_up is None:
                raise InvalidToken()
            if top_up.used:
                raise TokenAlreadyUsed()
            if self._clock() - top_up.created_at > self._ttl:
                raise TokenExpired()

            balance = self._ledger.credit(
                top_up.username, top_up.amount, reference=f"topup:{token[:8]}"
            )
            top_up.used = True

        log.info("Redeemed top-up token for %s, amount %s", top_up.username, top_up.amount)
        return Redemption(username=top_up.username, amount=top_up.amount, balance=balance)

    def tokens(self) -> List[TopUpToken]:
        with self._lock:
            return list(self._tokens.values())
