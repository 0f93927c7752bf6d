"""
Map vote tallying.

A vote runs in two steps: options are published through the chat transport,
which returns a handle, and after the window has elapsed the transport is
asked for the per-token counts behind that handle. Resolution is plurality
with a uniform random tie-break.
"""

import asyncio
import random
import string
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from .errors import NoMapsConfigured
from .map_pool import MAX_MAPS

VOTE_TOKENS = string.ascii_lowercase


@dataclass(frozen=True)
class VoteOption:
    """A map offered in a vote and the token voters react with."""

    token: str
    map_name: str


@dataclass(frozen=True)
class VoteHandle:
    """Reference to an open vote, returned by the transport when it opens one."""

    vote_id: str
    options: tuple[VoteOption, ...] = ()


@dataclass
class VoteOutcome:
    """Result of a resolved vote."""

    map_name: str
    tie_broken: bool
    tally: dict[str, int] = field(default_factory=dict)  # map name -> count


def assign_tokens(maps: list[str]) -> list[VoteOption]:
    """
    Give each map a distinct single-letter token, in registry order.

    Raises:
        NoMapsConfigured: The pool is empty or larger than the token alphabet.
    """
    if not maps or len(maps) > MAX_MAPS:
        raise NoMapsConfigured(count=len(maps))
    return [VoteOption(token, name) for token, name in zip(VOTE_TOKENS, maps)]


def tally_votes(options: list[VoteOption], counts: dict[str, int]) -> dict[str, int]:
    """
    Map per-token counts back to map names.

    Tokens that do not belong to an option are ignored; options nobody voted
    for count as zero.
    """
    tally = {option.map_name: 0 for option in options}
    by_token = {option.token: option.map_name for option in options}
    for token, count in counts.items():
        map_name = by_token.get(token)
        if map_name is not None:
            tally[map_name] += max(0, count)
    return tally


def resolve_vote(tally: dict[str, int], rng: random.Random | None = None) -> VoteOutcome:
    """
    Pick the winning map.

    The map with the highest count wins. When several maps share the highest
    count (including the all-zero case) one of them is chosen uniformly at
    random.

    Args:
        tally: Map name -> vote count, in registry order.
        rng: Random source for the tie-break; seed it for reproducible results.
    """
    if not tally:
        raise NoMapsConfigured(count=0)
    rng = rng or random.Random()
    best = max(tally.values())
    tied = [name for name, count in tally.items() if count == best]
    if len(tied) == 1:
        return VoteOutcome(tied[0], tie_broken=False, tally=dict(tally))
    winner = tied[rng.randrange(len(tied))]
    return VoteOutcome(winner, tie_broken=True, tally=dict(tally))


@dataclass
class VoteWindow:
    """Timing of a map vote: total duration and when the closing notice goes out."""

    duration: float = 60.0
    notice_at: float = 50.0

    @property
    def notice_remaining(self) -> float:
        """Seconds left in the window when the notice is sent."""
        return max(0.0, self.duration - self.notice_at)

    async def wait(
        self,
        on_notice: Callable[[float], Awaitable[None]] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Sleep through the window, calling `on_notice` at the notice mark.

        The caller must not hold the state lock while waiting.
        """
        if on_notice is None or self.notice_at >= self.duration:
            await sleep(self.duration)
            return
        await sleep(self.notice_at)
        await on_notice(self.notice_remaining)
        await sleep(self.notice_remaining)
