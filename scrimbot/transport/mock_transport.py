"""In-memory transport for unit tests and simulations."""

from dataclasses import dataclass
from typing import Any

from ..session.errors import TransportError
from ..session.participant import Participant
from ..session.vote import VoteHandle, VoteOption
from .base import ChatTransport


@dataclass
class Message:
    """A captured outbound event."""

    type: str
    data: dict[str, Any]


class MockTransport(ChatTransport):
    """
    Mock implementation of ChatTransport that captures everything it is asked
    to send, for assertions.

    Vote counts for the next vote are preloaded with `set_votes`; failures can
    be switched on per operation to exercise error paths.
    """

    def __init__(self):
        self.messages: list[Message] = []
        self.open_votes: dict[str, dict[str, int]] = {}
        self.next_votes: dict[str, int] = {}
        self.fail_announce = False
        self.fail_open_vote = False
        self.fail_relocate = False
        self._vote_counter = 0

    async def announce(self, text: str) -> None:
        if self.fail_announce:
            raise TransportError(operation="announce")
        self.messages.append(Message("announce", {"text": text}))

    async def open_vote(self, options: list[VoteOption]) -> VoteHandle:
        if self.fail_open_vote:
            raise TransportError(operation="open_vote")
        self._vote_counter += 1
        vote_id = f"vote-{self._vote_counter}"
        self.open_votes[vote_id] = dict(self.next_votes)
        self.messages.append(
            Message("open_vote", {"vote_id": vote_id, "options": list(options)})
        )
        return VoteHandle(vote_id, tuple(options))

    async def read_vote_result(self, handle: VoteHandle) -> dict[str, int]:
        counts = self.open_votes.pop(handle.vote_id, {})
        self.messages.append(Message("read_vote", {"vote_id": handle.vote_id}))
        return counts

    async def relocate(self, participant: Participant, destination: str) -> None:
        if self.fail_relocate:
            raise TransportError(operation="relocate")
        self.messages.append(
            Message("relocate", {"participant": participant, "destination": destination})
        )

    # Test helper methods

    def set_votes(self, counts: dict[str, int]) -> None:
        """Preload the reaction counts every subsequently opened vote returns."""
        self.next_votes = dict(counts)

    def get_announcements(self) -> list[str]:
        """Get all announced texts."""
        return [m.data["text"] for m in self.messages if m.type == "announce"]

    def get_last_announcement(self) -> str | None:
        for m in reversed(self.messages):
            if m.type == "announce":
                return m.data["text"]
        return None

    def get_relocations(self) -> list[tuple[Participant, str]]:
        return [
            (m.data["participant"], m.data["destination"])
            for m in self.messages
            if m.type == "relocate"
        ]

    def clear_messages(self) -> None:
        self.messages.clear()
