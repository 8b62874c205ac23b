from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Mapping

from domain.errors import ConfigurationError
from domain.models import AdminAccount, UserAccount


DEFAULT_USERS = "markaz,admin"
DEFAULT_ADMINS = "udin123"
DEFAULT_XMPP_HOST = "xmpp.cz"
DEFAULT_XMPP_PORT = 5222
DEFAULT_TOKEN_TTL_SECONDS = 3600


@dataclass
class Settings:
    """Validated runtime configuration."""

    telegram_token: str
    users: List[UserAccount] = field(default_factory=list)
    admins: List[AdminAccount] = field(default_factory=list)
    xmpp_host: str = DEFAULT_XMPP_HOST
    xmpp_port: int = DEFAULT_XMPP_PORT
    token_ttl: timedelta = timedelta(seconds=DEFAULT_TOKEN_TTL_SECONDS)
    log_level: str = "INFO"


def _env_key(username: str, suffix: str) -> str:
    return f"USER_{username.upper()}_{suffix}"


def _split_names(raw: str) -> List[str]:
    return [name.strip() for name in raw.split(",") if name.strip()]


def _parse_int(
    environ: Mapping[str, str],
    key: str,
    default: int,
    problems: List[str],
    minimum: int = 0,
) -> int:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        problems.append(f"{key} must be an integer, got {raw!r}")
        return default
    if value < minimum:
        problems.append(f"{key} must be >= {minimum}, got {value}")
        return default
    return value


def load_settings(environ: Mapping[str, str]) -> Settings:
    """
    Build `Settings` from environment-style key/values.

    Every missing or malformed key is collected and reported in a single
    `ConfigurationError` so the process fails before accepting traffic.
    """

    problems: List[str] = []

    def required(key: str) -> str:
        value = environ.get(key, "").strip()
        if not value:
            problems.append(f"{key} is not set")
        return value

    telegram_token = required("TELEGRAM_BOT_TOKEN")

    users: List[UserAccount] = []
    user_names = _split_names(environ.get("BOT_USERS", DEFAULT_USERS))
    if not user_names:
        problems.append("BOT_USERS must list at least one user")
    for name in user_names:
        users.append(
            UserAccount(
                username=name,
                password=required(_env_key(name, "PASSWORD")),
                jid=required(_env_key(name, "JID")),
                jabber_password=required(_env_key(name, "JABBERPASSWORD")),
                balance=_parse_int(environ, _env_key(name, "BALANCE"), 0, problems),
            )
        )

    admins: List[AdminAccount] = []
    for name in _split_names(environ.get("BOT_ADMINS", DEFAULT_ADMINS)):
        admins.append(
            AdminAccount(
                username=name,
                password=required(_env_key(name, "PASSWORD")),
                chat_id=required(_env_key(name, "CHAT_ID")),
            )
        )

    if len(set(user_names)) != len(user_names):
        problems.append("BOT_USERS contains duplicate names")

    xmpp_port = _parse_int(environ, "XMPP_PORT", DEFAULT_XMPP_PORT, problems, minimum=1)
    ttl_seconds = _parse_int(
        environ, "TOKEN_TTL_SECONDS", DEFAULT_TOKEN_TTL_SECONDS, problems, minimum=1
    )
    log_level = environ.get("LOG_LEVEL", "").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(log_level), int):
        problems.append(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

    if problems:
        raise ConfigurationError(problems)

    return Settings(
        telegram_token=telegram_token,
        users=users,
        admins=admins,
        xmpp_host=environ.get("XMPP_HOST", "").strip() or DEFAULT_XMPP_HOST,
        xmpp_port=xmpp_port,
        token_ttl=timedelta(seconds=ttl_seconds),
        log_level=log_level,
    )
