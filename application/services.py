from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from application.ledger import Ledger
from application.tokens import TokenService
from domain.catalog import Catalog
from domain.errors import InvalidAmount, UnknownProduct
from domain.repositories import AdminRepository


HELP_TEXT = (
    "Welcome to the Putra Bungsu top-up bot!\n\n"
    "Login:\n"
    "/login <username> <password>\n"
    "/logout\n\n"
    "Balance:\n"
    "/balance <username>\n"
    "/topup <token>\n\n"
    "Purchase:\n"
    "<product>.<destination>.<pin>\n"
    "Example: dana10.081234567890.123456\n\n"
    "Products:\n"
    "/products\n\n"
    "Admin:\n"
    "/adminLogin <adminId> <password>\n"
    "/adminLogout\n"
    "/createToken <username> <amount>\n"
    "/viewBalanceReport\n"
    "/viewTransactionReport"
)


@dataclass
class BroadcastMessage:
    """A message that should be delivered to a particular conversation."""

    conversation_id: str
    text: str


@dataclass
class CommandResult:
    """Reply to the sender plus any messages for other conversations."""

    success: bool
    reply: str
    broadcasts: List[BroadcastMessage] = field(default_factory=list)


def format_rupiah(amount: int) -> str:
    return f"Rp{amount}"


def parse_amount(raw: str) -> int:
    try:
        amount = int(raw)
    except ValueError:
        raise InvalidAmount("Amount must be a number.") from None
    if amount <= 0:
        raise InvalidAmount("Amount must be greater than zero.")
    return amount


def purchase_product(
    username: str,
    product_code: str,
    destination: str,
    ledger: Ledger,
    catalog: Catalog,
) -> CommandResult:
    """
    Charge the price of a catalog product to `username`.

    The balance is left untouched when the code is unknown or the
    balance is too low.
    """

    product = catalog.get(product_code)
    if product is None:
        raise UnknownProduct(f"Unknown product code: {product_code}.")

    balance = ledger.debit(username, product.price, reference=f"{product.code}:{destination}")
    return CommandResult(
        success=True,
        reply=(
            f"Purchase of {product.name} for {destination} successful "
            f"({format_rupiah(product.price)}). "
            f"Remaining balance: {format_rupiah(balance)}."
        ),
    )


def issue_top_up_token(
    username: str,
    raw_amount: str,
    tokens: TokenService,
) -> CommandResult:
    amount = parse_amount(raw_amount)
    token = tokens.issue(username, amount)
    return CommandResult(
        success=True,
        reply=(
            f"Top-up token for {username} ({format_rupiah(amount)}):\n"
            f"{token}"
        ),
    )


def redeem_top_up_token(
    token: str,
    tokens: TokenService,
    admin_repo: AdminRepository,
) -> CommandResult:
    """
    Redeem a top-up token and notify every admin.
    """

    redemption = tokens.redeem(token)
    reply = (
        f"Top-up successful. Added {format_rupiah(redemption.amount)} "
        f"to {redemption.username}. New balance: {format_rupiah(redemption.balance)}."
    )
    notice = f"{redemption.username} redeemed a top-up of {format_rupiah(redemption.amount)}."
    broadcasts = [
        BroadcastMessage(conversation_id=admin.chat_id, text=notice)
        for admin in admin_repo.get_all_admins()
    ]
    return CommandResult(success=True, reply=reply, broadcasts=broadcasts)


def balance_text(username: str, ledger: Ledger) -> str:
    return f"The balance for {username} is {format_rupiah(ledger.balance_of(username))}."


def balance_report(ledger: Ledger) -> str:
    lines = [f"{username}: {format_rupiah(balance)}" for username, balance in ledger.balances()]
    if not lines:
        return "No accounts."
    return "Balance report:\n" + "\n".join(lines)


def transaction_report(ledger: Ledger) -> str:
    history = ledger.history()
    if not history:
        return "No transactions yet."

    lines = [
        f"{tx.created_at:%Y-%m-%d %H:%M:%S} {tx.username} {tx.kind.value} "
        f"{format_rupiah(tx.amount)} {tx.reference}".rstrip()
        for tx in history
    ]
    return "Transaction report:\n" + "\n".join(lines)


def product_listing(catalog: Catalog) -> str:
    lines = [f"{p.code} - {p.name} - {format_rupiah(p.price)}" for p in catalog.all()]
    return "Available products:\n" + "\n".join(lines)
