"""Tests for the player queue."""

import random

import pytest

from scrimbot.session.errors import AlreadyQueued, NotQueued, QueueFull
from scrimbot.session.participant import Participant
from scrimbot.session.queue import QUEUE_CAPACITY, PlayerQueue


def make_players(count: int) -> list[Participant]:
    return [Participant(f"id{i}", f"Player{i}") for i in range(count)]


class TestPlayerQueue:
    """Unit tests for PlayerQueue."""

    def setup_method(self):
        self.queue = PlayerQueue()
        self.players = make_players(12)

    def test_defaults(self):
        """A new queue is empty with capacity 10."""
        assert self.queue.capacity == QUEUE_CAPACITY == 10
        assert len(self.queue) == 0
        assert not self.queue.is_full

    def test_join_appends_in_order(self):
        """Joining returns the new size and keeps arrival order."""
        assert self.queue.join(self.players[0]) == 1
        assert self.queue.join(self.players[1]) == 2
        assert list(self.queue) == self.players[:2]

    def test_join_twice_fails(self):
        """A participant cannot be queued twice."""
        self.queue.join(self.players[0])
        with pytest.raises(AlreadyQueued):
            self.queue.join(self.players[0])
        assert len(self.queue) == 1

    def test_identity_is_by_id(self):
        """A renamed participant is still the same queue member."""
        self.queue.join(Participant("id0", "Old name"))
        with pytest.raises(AlreadyQueued):
            self.queue.join(Participant("id0", "New name"))

    def test_join_full_queue_fails_unchanged(self):
        """Joining a full queue fails with QueueFull and leaves it as is."""
        for player in self.players[:10]:
            self.queue.join(player)
        assert self.queue.is_full
        before = list(self.queue)

        with pytest.raises(QueueFull) as excinfo:
            self.queue.join(self.players[10])
        assert excinfo.value.kwargs == {"capacity": 10}
        assert list(self.queue) == before

    def test_leave(self):
        """Leaving removes only that participant."""
        for player in self.players[:3]:
            self.queue.join(player)
        assert self.queue.leave(self.players[1]) == 2
        assert list(self.queue) == [self.players[0], self.players[2]]

    def test_leave_when_absent_fails(self):
        with pytest.raises(NotQueued):
            self.queue.leave(self.players[0])

    def test_kick(self):
        """Kicking behaves like leaving on the target's behalf."""
        self.queue.join(self.players[0])
        assert self.queue.kick(self.players[0]) == 0
        with pytest.raises(NotQueued):
            self.queue.kick(self.players[0])

    def test_clear(self):
        for player in self.players[:5]:
            self.queue.join(player)
        self.queue.clear()
        assert len(self.queue) == 0

    def test_iteration_is_a_snapshot(self):
        """Mutating the queue while iterating does not disturb the loop."""
        for player in self.players[:4]:
            self.queue.join(player)
        for player in self.queue:
            self.queue.leave(player)
        assert len(self.queue) == 0

    def test_random_sequences_keep_invariants(self):
        """No join/leave sequence can overfill the queue or duplicate a member."""
        rng = random.Random(1234)
        for _ in range(2000):
            player = rng.choice(self.players)
            try:
                if rng.random() < 0.6:
                    self.queue.join(player)
                else:
                    self.queue.leave(player)
            except (AlreadyQueued, QueueFull, NotQueued):
                pass
            members = list(self.queue)
            assert len(members) <= QUEUE_CAPACITY
            assert len(set(members)) == len(members)
