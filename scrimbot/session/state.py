"""
Shared state bundle for match setup.

One ScrimState exists per process. Every command handler acquires its lock
for the whole operation, so handlers never observe each other's partial
updates.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from .draft import UNSET, Captain, Draft, TeamSide, Unset
from .errors import WrongPhase
from .map_pool import MapPool
from .phases import Phase, Side
from .queue import PlayerQueue

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Phase and draft progress of the match setup in flight."""

    phase: Phase = Phase.QUEUE
    draft: Draft = field(default_factory=Draft)
    starting_side: Side | Unset = UNSET  # Side chosen by captain B for team B
    selected_map: str | Unset = UNSET

    def require(self, command: str, *phases: Phase) -> None:
        """
        Check that the session is in one of `phases`.

        Raises:
            WrongPhase: The session is in any other phase.
        """
        if self.phase not in phases:
            raise WrongPhase(command=command, phase=self.phase.value)

    def advance(self, target: Phase) -> None:
        """Move to the next phase along the setup sequence."""
        if not self.phase.can_transition_to(target):
            raise ValueError(f"Illegal phase transition {self.phase.value} -> {target.value}")
        logger.info("Phase %s -> %s", self.phase.value, target.value)
        self.phase = target

    @property
    def is_blank(self) -> bool:
        """True for a fresh Queue-phase session with no setup progress."""
        return (
            self.phase is Phase.QUEUE
            and self.draft.is_empty
            and not self.starting_side
            and not self.selected_map
        )

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of the session for logs and JSON output."""
        draft = self.draft

        def slot_id(slot: Captain | Unset) -> str | None:
            return slot.participant.id if isinstance(slot, Captain) else None

        return {
            "phase": self.phase.value,
            "captain_a": slot_id(draft.captain_a),
            "captain_b": slot_id(draft.captain_b),
            "current_picker": slot_id(draft.current_picker),
            "team_a": [p.to_dict() for p in draft.team_a.members],
            "team_b": [p.to_dict() for p in draft.team_b.members],
            "starting_side": self.starting_side.value
            if isinstance(self.starting_side, Side)
            else None,
            "selected_map": self.selected_map if isinstance(self.selected_map, str) else None,
        }


@dataclass
class ScrimState:
    """Everything match setup commands read and write, behind one lock."""

    queue: PlayerQueue = field(default_factory=PlayerQueue)
    pool: MapPool = field(default_factory=MapPool)
    riot_ids: dict[str, str] = field(default_factory=dict)  # participant id -> Riot id
    team_names: dict[str, str] = field(default_factory=dict)  # captain id -> team name
    session: Session = field(default_factory=Session)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    def reset_session(self) -> Session:
        """Replace the session with a blank Queue-phase one."""
        self.session = Session()
        return self.session

    def team_name(self, side: TeamSide) -> str:
        """Custom team name of a team's captain, falling back to their display name."""
        captain = self.session.draft.captain(side)
        if not isinstance(captain, Captain):
            return side.value.upper()
        participant = captain.participant
        return self.team_names.get(participant.id) or str(participant)
