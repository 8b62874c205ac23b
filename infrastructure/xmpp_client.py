from __future__ import annotations

import logging

import slixmpp

from domain.repositories import InboundHandler, MessagingConnectionFactory


log = logging.getLogger(__name__)


class XmppBridgeClient(slixmpp.ClientXMPP):
    """
    slixmpp client for one bridged user.

    On session start it announces presence with `show=chat`. Bodies of
    inbound messages of any type but `error` are handed to `on_message`.
    Connection and authentication failures are only logged.
    """

    def __init__(
        self,
        jid: str,
        password: str,
        on_message: InboundHandler,
        host: str,
        port: int,
    ) -> None:
        super().__init__(jid, password)
        self._on_message = on_message
        self._host = host
        self._port = port

        self.add_event_handler("session_start", self._handle_session_start)
        self.add_event_handler("message", self._handle_message)
        self.add_event_handler("connection_failed", self._handle_connection_failed)
        self.add_event_handler("failed_auth", self._handle_failed_auth)
        self.add_event_handler("disconnected", self._handle_disconnected)

    def open(self) -> None:
        # Returns immediately; the connection completes on the event loop.
        self.connect(host=self._host, port=self._port)

    async def close(self) -> None:
        # disconnect() alone leaves a pending connect running.
        self.cancel_connection_attempt()
        await self.disconnect()

    async def _handle_session_start(self, event) -> None:
        log.info("Connected to XMPP as %s", self.boundjid.bare)
        self.send_presence(pshow="chat")

    async def _handle_message(self, msg) -> None:
        if msg["type"] == "error":
            return
        body = msg["body"]
        if not body:
            return
        await self._on_message(body)

    def _handle_connection_failed(self, error) -> None:
        log.error("XMPP connection failed for %s: %s", self.boundjid.bare, error)

    def _handle_failed_auth(self, event) -> None:
        log.error("XMPP authentication failed for %s", self.boundjid.bare)

    def _handle_disconnected(self, reason) -> None:
        log.info("XMPP connection closed for %s: %s", self.boundjid.bare, reason)


class XmppConnectionFactory(MessagingConnectionFactory):
    """Creates `XmppBridgeClient`s pointed at a fixed host and port."""

    def __init__(self, host: str, port: int) -> None:
        self._host = host
        self._port = port

    def __call__(
        self,
        jid: str,
        password: str,
        on_message: InboundHandler,
    ) -> XmppBridgeClient:
        return XmppBridgeClient(jid, password, on_message, self._host, self._port)
