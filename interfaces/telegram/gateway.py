from __future__ import annotations

import logging

from telebot.async_telebot import AsyncTeleBot

from domain.models import SendResult
from domain.repositories import ChatGateway


log = logging.getLogger(__name__)


class TelegramChatGateway(ChatGateway):
    """Sends chat text through an `AsyncTeleBot` and reports the outcome."""

    def __init__(self, bot: AsyncTeleBot) -> None:
        self._bot = bot

    async def send(self, conversation_id: str, text: str) -> SendResult:
        try:
            await self._bot.send_message(conversation_id, text)
        except Exception as exc:
            log.warning("Error sending message to Telegram chat %s: %s", conversation_id, exc)
            return SendResult(ok=False, error=str(exc))
        return SendResult(ok=True)
