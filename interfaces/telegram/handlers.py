from __future__ import annotations

import logging

from telebot.async_telebot import AsyncTeleBot

from application.dispatcher import CommandDispatcher
from domain.repositories import ChatGateway


log = logging.getLogger(__name__)


def create_telegram_bot(bot_token: str) -> AsyncTeleBot:
    return AsyncTeleBot(bot_token)


def register_handlers(
    bot: AsyncTeleBot,
    dispatcher: CommandDispatcher,
    chat: ChatGateway,
) -> AsyncTeleBot:
    """
    Wire every inbound text message to the command dispatcher.

    This module contains only Telegram-specific concerns: reading the chat
    id and text from a Telegram message and delivering the replies. The
    grammar itself lives in the application layer.
    """

    @bot.message_handler(content_types=["text"])
    async def handle_text(message):
        conversation_id = str(message.chat.id)
        text = (message.text or "").strip()
        log.info("Received message from chat %s: %s", conversation_id, _redact(text))

        result = await dispatcher.dispatch(conversation_id, text)

        await chat.send(conversation_id, result.reply)
        for broadcast in result.broadcasts:
            await chat.send(broadcast.conversation_id, broadcast.text)

    return bot


def _redact(text: str) -> str:
    """Hide credentials and pins from the log line."""

    parts = text.split()
    if parts and parts[0].split("@", 1)[0] in ("/login", "/adminLogin"):
        return " ".join(parts[:2] + ["***"] * len(parts[2:]))
    if not text.startswith("/") and text.count(".") == 2:
        product, destination, _pin = text.split(".")
        return f"{product}.{destination}.***"
    return text
