from __future__ import annotations

import logging

from application.commands import ParsedCommand, parse_command
from application.ledger import Ledger
from application.locks import KeyedLock
from application.services import (
    HELP_TEXT,
    CommandResult,
    balance_report,
    balance_text,
    issue_top_up_token,
    product_listing,
    purchase_product,
    redeem_top_up_token,
    transaction_report,
)
from application.sessions import SessionRegistry
from application.tokens import TokenService
from domain.catalog import Catalog
from domain.errors import BotError
from domain.models import Role
from domain.repositories import AdminRepository


log = logging.getLogger(__name__)


class CommandDispatcher:
    """
    Turns one inbound chat text into a `CommandResult`.

    `dispatch` never raises: domain errors become a failed result carrying
    their message and anything unexpected is logged and reported with a
    generic reply. Texts from the same conversation are handled one at a
    time in arrival order.
    """

    def __init__(
        self,
        sessions: SessionRegistry,
        ledger: Ledger,
        tokens: TokenService,
        catalog: Catalog,
        admin_repo: AdminRepository,
    ) -> None:
        self._sessions = sessions
        self._ledger = ledger
        self._tokens = tokens
        self._catalog = catalog
        self._admin_repo = admin_repo
        self._locks = KeyedLock()

    async def dispatch(self, conversation_id: str, text: str) -> CommandResult:
        async with self._locks.hold(conversation_id):
            try:
                command = parse_command(text)
                return await self._handle(conversation_id, command)
            except BotError as exc:
                log.warning("Command from chat %s rejected: %s", conversation_id, exc.message)
                return CommandResult(success=False, reply=exc.message)
            except Exception:
                log.exception("Unexpected error handling command from chat %s", conversation_id)
                return CommandResult(success=False, reply="Something went wrong, please try again.")

    async def _handle(self, conversation_id: str, command: ParsedCommand) -> CommandResult:
        name, args = command.name, command.args

        if name in ("start", "help"):
            return CommandResult(success=True, reply=HELP_TEXT)

        if name == "login":
            username, password = args
            await self._sessions.login(conversation_id, username, password, Role.USER)
            return CommandResult(success=True, reply=f"Logged in as {username}.")

        if name == "logout":
            session = await self._sessions.logout(conversation_id, Role.USER)
            return CommandResult(success=True, reply=f"Logged out {session.username}.")

        if name == "adminLogin":
            admin_id, password = args
            await self._sessions.login(conversation_id, admin_id, password, Role.ADMIN)
            return CommandResult(success=True, reply=f"Logged in as admin {admin_id}.")

        if name == "adminLogout":
            session = await self._sessions.logout(conversation_id, Role.ADMIN)
            return CommandResult(success=True, reply=f"Admin {session.username} logged out.")

        if name == "balance":
            # Public lookup: any account can be queried without logging in.
            return CommandResult(success=True, reply=balance_text(args[0], self._ledger))

        if name == "products":
            return CommandResult(success=True, reply=product_listing(self._catalog))

        if name == "viewBalanceReport":
            self._sessions.require(conversation_id, Role.ADMIN)
            return CommandResult(success=True, reply=balance_report(self._ledger))

        if name == "viewTransactionReport":
            self._sessions.require(conversation_id, Role.ADMIN)
            return CommandResult(success=True, reply=transaction_report(self._ledger))

        if name == "createToken":
            self._sessions.require(conversation_id, Role.ADMIN)
            username, raw_amount = args
            return issue_top_up_token(username, raw_amount, self._tokens)

        if name == "topup":
            self._sessions.require(conversation_id, Role.USER)
            return redeem_top_up_token(args[0], self._tokens, self._admin_repo)

        if name == "purchase":
            session = self._sessions.require(conversation_id, Role.USER)
            product_code, destination, _pin = args
            return purchase_product(
                session.username, product_code, destination, self._ledger, self._catalog
            )

        raise AssertionError(f"Unhandled command: {name}")
