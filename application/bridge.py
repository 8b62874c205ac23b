from __future__ import annotations

import logging
from typing import Optional

from domain.models import UserAccount
from domain.repositories import (
    ChatGateway,
    MessagingConnection,
    MessagingConnectionFactory,
)


log = logging.getLogger(__name__)


class BridgeConnector:
    """
    Relays inbound XMPP messages of one user to one chat conversation.

    The connector owns exactly one messaging connection. `close` is safe to
    call any number of times and the connector can be used as an async
    context manager so the connection is released on every exit path.
    Only the inbound direction (XMPP -> chat) is relayed.
    """

    def __init__(
        self,
        account: UserAccount,
        conversation_id: str,
        chat: ChatGateway,
        connection_factory: MessagingConnectionFactory,
    ) -> None:
        self._account = account
        self._conversation_id = conversation_id
        self._chat = chat
        self._connection_factory = connection_factory
        self._connection: Optional[MessagingConnection] = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._connection is not None and not self._closed

    async def open(self) -> None:
        if self._connection is not None:
            return
        if self._closed:
            raise RuntimeError("Bridge has been closed.")

        self._connection = self._connection_factory(
            self._account.jid,
            self._account.jabber_password,
            self.relay,
        )
        # Connection errors are reported by the connection itself; the
        # session stays logged in with a possibly dead bridge.
        self._connection.open()
        log.info(
            "Bridge opening for %s (%s) -> chat %s",
            self._account.username,
            self._account.jid,
            self._conversation_id,
        )

    async def relay(self, body: str) -> None:
        if self._closed:
            return

        result = await self._chat.send(self._conversation_id, body)
        if result.ok:
            log.info("Relayed XMPP message for %s to chat %s", self._account.username, self._conversation_id)
        else:
            log.warning(
                "Failed to relay XMPP message to chat %s: %s",
                self._conversation_id,
                result.error,
            )

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            await connection.close()
        except Exception:
            log.exception("Error while closing bridge for %s", self._account.username)
        else:
            log.info("Bridge closed for %s", self._account.username)

    async def __aenter__(self) -> "BridgeConnector":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
