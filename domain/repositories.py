from __future__ import annotations

from typing import Awaitable, Callable, List, Optional, Protocol

from .models import AdminAccount, SendResult, UserAccount


class UserRepository(Protocol):
    """
    Abstraction over customer account storage.

    Implementations are responsible for:
    - Returning `UserAccount` domain objects by username.
    - Applying balance deltas; callers validate the delta beforehand.
    """

    def get_user(self, username: str) -> Optional[UserAccount]:
        """Return the account with the given username, or None if not found."""

        ...

    def get_all_users(self) -> List[UserAccount]:
        """Return all accounts in configuration order."""

        ...

    def update_balance(self, username: str, delta: int) -> int:
        """Adjust a balance by `delta` and return the new balance."""

        ...


class AdminRepository(Protocol):
    """Lookup of operator accounts."""

    def get_admin(self, username: str) -> Optional[AdminAccount]:
        ...

    def get_all_admins(self) -> List[AdminAccount]:
        ...


class ChatGateway(Protocol):
    """
    Outbound side of the chat front-end.

    `send` never raises for delivery problems; it reports them in the
    returned `SendResult` and leaves the decision to the caller.
    """

    async def send(self, conversation_id: str, text: str) -> SendResult:
        ...


InboundHandler = Callable[[str], Awaitable[None]]


class MessagingConnection(Protocol):
    """A single connection to the messaging host owned by one bridge."""

    def open(self) -> None:
        """Start connecting. Must not block; completion is asynchronous."""

        ...

    async def close(self) -> None:
        """Terminate the connection, including a connect still in progress."""

        ...


class MessagingConnectionFactory(Protocol):
    """
    Builds a connection for the given credentials.

    `on_message` is awaited with the body of every inbound chat message.
    """

    def __call__(
        self,
        jid: str,
        password: str,
        on_message: InboundHandler,
    ) -> MessagingConnection:
        ...
