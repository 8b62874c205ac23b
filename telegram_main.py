import asyncio
import logging
import os

from dotenv import load_dotenv

from application.container import build_services
from infrastructure.config import load_settings
from infrastructure.xmpp_client import XmppConnectionFactory
from interfaces.telegram.gateway import TelegramChatGateway
from interfaces.telegram.handlers import create_telegram_bot, register_handlers


log = logging.getLogger("putra_bot")


async def run() -> None:
    # Raises ConfigurationError before anything connects.
    settings = load_settings(os.environ)
    logging.getLogger().setLevel(settings.log_level)

    bot = create_telegram_bot(settings.telegram_token)
    chat = TelegramChatGateway(bot)
    services = build_services(
        settings,
        chat,
        XmppConnectionFactory(settings.xmpp_host, settings.xmpp_port),
    )
    register_handlers(bot, services.dispatcher, chat)

    log.info("Starting Telegram polling")
    try:
        await bot.polling(non_stop=True)
    finally:
        await services.aclose()
        await bot.close_session()
        log.info("Shut down")


def main() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s :: %(message)s")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
