"""Abstract chat transport that match setup talks through."""

from abc import ABC, abstractmethod

from ..session.participant import Participant
from ..session.vote import VoteHandle, VoteOption


class ChatTransport(ABC):
    """
    Abstract base class for chat transports.

    Match setup interacts with this interface, never with network code
    directly. Implementations include WebSocketChatTransport (the chat
    server) and MockTransport (for testing).

    Every method may raise TransportError; callers log it and keep whatever
    state they already committed.
    """

    @abstractmethod
    async def announce(self, text: str) -> None:
        """
        Post a message to the scrim channel.

        Args:
            text: The message text.
        """
        ...

    @abstractmethod
    async def open_vote(self, options: list[VoteOption]) -> VoteHandle:
        """
        Publish vote options and start collecting reactions.

        Args:
            options: Tokens and the maps they stand for.

        Returns:
            Handle to pass to read_vote_result once the window has elapsed.
        """
        ...

    @abstractmethod
    async def read_vote_result(self, handle: VoteHandle) -> dict[str, int]:
        """
        Close a vote and return its reaction count per token.

        Tokens may include reactions that match no option.
        """
        ...

    @abstractmethod
    async def relocate(self, participant: Participant, destination: str) -> None:
        """
        Move a participant to a team channel.

        Args:
            participant: Who to move.
            destination: Channel identifier from the configuration.
        """
        ...
