from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class TransactionKind(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


@dataclass
class UserAccount:
    """
    A customer account able to buy products and bridge to XMPP.

    Accounts are created at startup from configuration and never removed.
    The balance is kept in the smallest currency unit and is only changed
    through the `Ledger`.
    """

    username: str
    password: str
    jid: str
    jabber_password: str
    balance: int = 0


@dataclass
class AdminAccount:
    """Operator account; `chat_id` is where admin notifications are sent."""

    username: str
    password: str
    chat_id: str


@dataclass
class TopUpToken:
    """
    Single-use voucher crediting `amount` to `username`.

    Tokens are kept after use or expiry so they can still be audited.
    """

    token: str
    username: str
    amount: int
    created_at: datetime
    used: bool = False


@dataclass(frozen=True)
class Transaction:
    """One append-only entry of the ledger history."""

    username: str
    kind: TransactionKind
    amount: int
    created_at: datetime
    reference: str = ""


@dataclass(frozen=True)
class Product:
    code: str
    name: str
    price: int


@dataclass
class Session:
    """
    A logged-in conversation.

    `bridge` is only set for user sessions and is owned by the session:
    nothing but the session registry closes it.
    """

    conversation_id: str
    username: str
    role: Role
    bridge: Optional[Any] = None


@dataclass(frozen=True)
class SendResult:
    """Outcome of an outbound chat send."""

    ok: bool
    error: Optional[str] = None
