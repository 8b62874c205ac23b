from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from domain.errors import InvalidCommand, UsageError


@dataclass(frozen=True)
class CommandSpec:
    name: str
    params: tuple[str, ...] = ()

    @property
    def usage(self) -> str:
        return " ".join([f"/{self.name}", *(f"<{p}>" for p in self.params)])


COMMANDS: Dict[str, CommandSpec] = {
    command.name: command
    for command in (
        CommandSpec("start"),
        CommandSpec("help"),
        CommandSpec("login", ("username", "password")),
        CommandSpec("logout"),
        CommandSpec("balance", ("username",)),
        CommandSpec("adminLogin", ("adminId", "password")),
        CommandSpec("adminLogout"),
        CommandSpec("viewBalanceReport"),
        CommandSpec("viewTransactionReport"),
        CommandSpec("products"),
        CommandSpec("createToken", ("username", "amount")),
        CommandSpec("topup", ("token",)),
    )
}

PURCHASE_USAGE = "Usage: <product>.<destination>.<pin>"


@dataclass(frozen=True)
class ParsedCommand:
    """
    One inbound chat text turned into a command name and its arguments.

    Purchases use the name `purchase` with arguments
    (product, destination, pin).
    """

    name: str
    args: List[str] = field(default_factory=list)


def parse_command(text: str) -> ParsedCommand:
    """
    Parse chat text into a `ParsedCommand`.

    Raises `UsageError` for a known command with the wrong number of
    arguments and `InvalidCommand` for anything outside the grammar.
    """

    text = (text or "").strip()
    if not text:
        raise InvalidCommand()

    if text.startswith("/"):
        parts = text.split()
        # Telegram appends "@botname" to commands sent in group chats.
        name = parts[0][1:].split("@", 1)[0]
        command = COMMANDS.get(name)
        if command is None:
            raise InvalidCommand()

        args = parts[1:]
        if len(args) != len(command.params):
            raise UsageError(f"Usage: {command.usage}")
        return ParsedCommand(name=command.name, args=args)

    purchase = parse_purchase(text)
    if purchase is None:
        raise InvalidCommand()
    return purchase


def parse_purchase(text: str) -> Optional[ParsedCommand]:
    """
    Parse the `<product>.<destination>.<pin>` form.

    Returns None when the text does not look like a purchase at all.
    """

    if any(ch.isspace() for ch in text) or text.count(".") != 2:
        return None

    product, destination, pin = text.split(".")
    if not product or not destination or not pin:
        raise UsageError(PURCHASE_USAGE)
    return ParsedCommand(name="purchase", args=[product.lower(), destination, pin])
