"""
Tests for the map vote.

Covers token assignment, tallying, plurality resolution with the random
tie-break and the timing of the vote window.
"""

import random

import pytest

from scrimbot.session.errors import NoMapsConfigured
from scrimbot.session.vote import (
    VoteOption,
    VoteWindow,
    assign_tokens,
    resolve_vote,
    tally_votes,
)


class TestAssignTokens:
    """Tests for token assignment."""

    def test_tokens_follow_registry_order(self):
        options = assign_tokens(["Mirage", "Inferno", "Nuke"])
        assert options == [
            VoteOption("a", "Mirage"),
            VoteOption("b", "Inferno"),
            VoteOption("c", "Nuke"),
        ]

    def test_full_alphabet(self):
        """26 maps use every letter once."""
        options = assign_tokens([f"Map{i}" for i in range(26)])
        assert [o.token for o in options] == list("abcdefghijklmnopqrstuvwxyz")

    def test_empty_pool(self):
        with pytest.raises(NoMapsConfigured):
            assign_tokens([])

    def test_too_many_maps(self):
        with pytest.raises(NoMapsConfigured) as excinfo:
            assign_tokens([f"Map{i}" for i in range(27)])
        assert excinfo.value.kwargs == {"count": 27}


class TestTally:
    """Tests for tallying and resolution."""

    def setup_method(self):
        self.options = assign_tokens(["A", "B", "C"])

    def test_counts_map_back_to_names(self):
        tally = tally_votes(self.options, {"a": 3, "b": 1, "c": 2})
        assert tally == {"A": 3, "B": 1, "C": 2}

    def test_unknown_tokens_are_ignored(self):
        """Reactions that match no option do not count for any map."""
        tally = tally_votes(self.options, {"a": 1, "z": 9, "thumbsup": 4})
        assert tally == {"A": 1, "B": 0, "C": 0}

    def test_missing_tokens_count_zero(self):
        assert tally_votes(self.options, {}) == {"A": 0, "B": 0, "C": 0}

    def test_clear_winner(self):
        outcome = resolve_vote({"A": 1, "B": 4, "C": 2}, random.Random(0))
        assert outcome.map_name == "B"
        assert outcome.tie_broken is False

    def test_tie_break_is_roughly_uniform(self):
        """With A and B tied at the top, each wins about half the time."""
        rng = random.Random(42)
        wins = {"A": 0, "B": 0, "C": 0}
        for _ in range(1000):
            outcome = resolve_vote({"A": 3, "B": 3, "C": 1}, rng)
            assert outcome.tie_broken is True
            wins[outcome.map_name] += 1
        assert wins["C"] == 0
        assert 400 <= wins["A"] <= 600
        assert 400 <= wins["B"] <= 600

    def test_all_zero_still_picks_one(self):
        """Nobody voting falls through to the tie-break over every map."""
        outcome = resolve_vote({"A": 0, "B": 0, "C": 0}, random.Random(7))
        assert outcome.map_name in {"A", "B", "C"}
        assert outcome.tie_broken is True

    def test_seeded_tie_break_is_reproducible(self):
        first = resolve_vote({"A": 5, "B": 5}, random.Random(99))
        second = resolve_vote({"A": 5, "B": 5}, random.Random(99))
        assert first.map_name == second.map_name

    def test_empty_tally(self):
        with pytest.raises(NoMapsConfigured):
            resolve_vote({})


class TestVoteWindow:
    """Tests for the vote window timing."""

    def setup_method(self):
        self.sleeps: list[float] = []
        self.notices: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)

    async def on_notice(self, remaining: float) -> None:
        self.notices.append(remaining)

    @pytest.mark.asyncio
    async def test_default_timing(self):
        """A 60 second window sends its notice 10 seconds before closing."""
        window = VoteWindow()
        await window.wait(self.on_notice, sleep=self.sleep)
        assert self.sleeps == [50.0, 10.0]
        assert self.notices == [10.0]

    @pytest.mark.asyncio
    async def test_without_notice(self):
        window = VoteWindow(duration=30, notice_at=20)
        await window.wait(sleep=self.sleep)
        assert self.sleeps == [30]

    @pytest.mark.asyncio
    async def test_zero_length_window(self):
        window = VoteWindow(duration=0, notice_at=0)
        await window.wait(self.on_notice, sleep=self.sleep)
        assert self.sleeps == [0]
        assert self.notices == []
