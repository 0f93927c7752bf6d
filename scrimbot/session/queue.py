"""Ordered waiting list of participants."""

from dataclasses import dataclass, field

from .errors import AlreadyQueued, NotQueued, QueueFull
from .participant import Participant

QUEUE_CAPACITY = 10


@dataclass
class PlayerQueue:
    """
    Ordered, duplicate-free waiting list with a fixed capacity.

    Phase rules (join/leave/kick only while queueing) are enforced by the
    match setup controller, not here.
    """

    capacity: int = QUEUE_CAPACITY
    members: list[Participant] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, participant: Participant) -> bool:
        return participant in self.members

    def __iter__(self):
        return iter(list(self.members))

    @property
    def is_full(self) -> bool:
        return len(self.members) >= self.capacity

    def join(self, participant: Participant) -> int:
        """
        Append a participant to the queue.

        Returns:
            The new queue size.

        Raises:
            AlreadyQueued: The participant is already waiting.
            QueueFull: The queue holds `capacity` participants.
        """
        if participant in self.members:
            raise AlreadyQueued(player=participant.mention)
        if self.is_full:
            raise QueueFull(capacity=self.capacity)
        self.members.append(participant)
        return len(self.members)

    def leave(self, participant: Participant) -> int:
        """Remove a participant, returning the new queue size."""
        if participant not in self.members:
            raise NotQueued(player=participant.mention)
        self.members.remove(participant)
        return len(self.members)

    def kick(self, participant: Participant) -> int:
        """Remove a participant on behalf of an admin."""
        return self.leave(participant)

    def clear(self) -> None:
        self.members.clear()
