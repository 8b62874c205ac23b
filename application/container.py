from __future__ import annotations

import logging
from dataclasses import dataclass

from application.bridge import BridgeConnector
from application.dispatcher import CommandDispatcher
from application.ledger import Clock, Ledger, utc_now
from application.sessions import SessionRegistry
from application.tokens import TokenService
from domain.catalog import Catalog
from domain.models import UserAccount
from domain.repositories import ChatGateway, MessagingConnectionFactory
from infrastructure.config import Settings
from infrastructure.memory.account_repository_memory import (
    InMemoryAdminRepository,
    InMemoryUserRepository,
)


log = logging.getLogger(__name__)


@dataclass
class Services:
    """
    Everything the bot holds in memory, built once at startup.

    `aclose` must be awaited on shutdown so no XMPP connection outlives
    its session.
    """

    user_repo: InMemoryUserRepository
    admin_repo: InMemoryAdminRepository
    ledger: Ledger
    tokens: TokenService
    sessions: SessionRegistry
    dispatcher: CommandDispatcher

    async def aclose(self) -> None:
        await self.sessions.aclose()


def build_services(
    settings: Settings,
    chat: ChatGateway,
    connection_factory: MessagingConnectionFactory,
    clock: Clock = utc_now,
) -> Services:
    user_repo = InMemoryUserRepository(
        UserAccount(
            username=u.username,
            password=u.password,
            jid=u.jid,
            jabber_password=u.jabber_password,
            balance=u.balance,
        )
        for u in settings.users
    )
    admin_repo = InMemoryAdminRepository(settings.admins)

    def bridge_factory(account: UserAccount, conversation_id: str) -> BridgeConnector:
        return BridgeConnector(account, conversation_id, chat, connection_factory)

    ledger = Ledger(user_repo, clock=clock)
    tokens = TokenService(ledger, user_repo, clock=clock, ttl=settings.token_ttl)
    sessions = SessionRegistry(user_repo, admin_repo, bridge_factory)
    dispatcher = CommandDispatcher(sessions, ledger, tokens, Catalog(), admin_repo)

    log.info(
        "Services ready: %d users, %d admins",
        len(user_repo.get_all_users()),
        len(admin_repo.get_all_admins()),
    )
    return Services(
        user_repo=user_repo,
        admin_repo=admin_repo,
        ledger=ledger,
        tokens=tokens,
        sessions=sessions,
        dispatcher=dispatcher,
    )
