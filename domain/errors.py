from __future__ import annotations


class BotError(Exception):
    """
    Base class for failures that are reported back to the chat user.

    The message of every subclass is written to be sent as-is.
    """

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class UnknownUser(BotError):
    default_message = "User not found."


class InvalidAmount(BotError):
    default_message = "Amount must be positive."


class InsufficientFunds(BotError):
    default_message = "Insufficient balance."


class InvalidToken(BotError):
    default_message = "Invalid token."


class TokenAlreadyUsed(BotError):
    default_message = "Token has already been used."


class TokenExpired(BotError):
    default_message = "Token has expired."


class InvalidCredentials(BotError):
    default_message = "Invalid username or password."


class AlreadyLoggedIn(BotError):
    default_message = "You are already logged in."


class NotLoggedIn(BotError):
    default_message = "You are not logged in."


class UnknownProduct(BotError):
    default_message = "Unknown product code."


class InvalidCommand(BotError):
    default_message = "Invalid command."


class UsageError(BotError):
    """Raised when a known command gets the wrong number of arguments."""


class ConfigurationError(Exception):
    """Raised at startup when required settings are missing or malformed."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Invalid configuration: " + "; ".join(self.problems))
