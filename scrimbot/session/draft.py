"""
Captain claims and the alternating player draft.

Captain and picker fields are explicit slots: either UNSET or a Captain
wrapping the participant, so callers always check which case they have.
"""

from dataclasses import dataclass, field
from enum import Enum

from .errors import (
    AlreadyCaptain,
    AlreadyOnTeam,
    CaptainsTaken,
    NotCaptain,
    NotQueued,
    WrongTurn,
)
from .participant import Participant


class Unset:
    """Marker for a slot nobody holds yet."""

    _instance: "Unset | None" = None

    def __new__(cls) -> "Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = Unset()


class TeamSide(str, Enum):
    A = "a"
    B = "b"

    @property
    def other(self) -> "TeamSide":
        return TeamSide.B if self is TeamSide.A else TeamSide.A


@dataclass(frozen=True)
class Captain:
    """A participant holding captaincy of one team."""

    participant: Participant
    side: TeamSide


CaptainSlot = Captain | Unset


@dataclass
class Team:
    """One drafted team; its captain is always the first member."""

    side: TeamSide
    members: list[Participant] = field(default_factory=list)

    def __contains__(self, participant: Participant) -> bool:
        return participant in self.members

    def __len__(self) -> int:
        return len(self.members)


@dataclass
class Draft:
    """
    Draft state for one match setup.

    Team A's captain is whoever claims first and also picks first; picks then
    alternate strictly. Nothing evens out team sizes, so with an odd number of
    players to pick team A ends up one member larger.
    """

    captain_a: CaptainSlot = UNSET
    captain_b: CaptainSlot = UNSET
    team_a: Team = field(default_factory=lambda: Team(TeamSide.A))
    team_b: Team = field(default_factory=lambda: Team(TeamSide.B))
    current_picker: CaptainSlot = UNSET

    # ==========================================================================
    # Lookups
    # ==========================================================================

    @property
    def captains_set(self) -> bool:
        return isinstance(self.captain_a, Captain) and isinstance(self.captain_b, Captain)

    @property
    def is_empty(self) -> bool:
        return (
            not self.captain_a
            and not self.captain_b
            and not self.current_picker
            and not self.team_a.members
            and not self.team_b.members
        )

    def team(self, side: TeamSide) -> Team:
        return self.team_a if side is TeamSide.A else self.team_b

    def captain(self, side: TeamSide) -> CaptainSlot:
        return self.captain_a if side is TeamSide.A else self.captain_b

    def captain_for(self, participant: Participant) -> Captain | None:
        """Return the captain slot held by a participant, if any."""
        for slot in (self.captain_a, self.captain_b):
            if isinstance(slot, Captain) and slot.participant == participant:
                return slot
        return None

    def team_of(self, participant: Participant) -> Team | None:
        for team in (self.team_a, self.team_b):
            if participant in team:
                return team
        return None

    def remaining(self, queued: list[Participant]) -> list[Participant]:
        """Queued participants not yet on a team, in queue order."""
        return [p for p in queued if self.team_of(p) is None]

    # ==========================================================================
    # Captain claims
    # ==========================================================================

    def claim_captain(self, participant: Participant, queued: list[Participant]) -> Captain:
        """
        Make a queued participant captain of the first free team.

        The captain becomes the first member of their team. Once both
        captains are set, team A's captain holds the first pick.

        Raises:
            NotQueued: The claimant is not in the queue.
            AlreadyCaptain: The claimant already captains a team.
            CaptainsTaken: Both captaincies are held.
        """
        if participant not in queued:
            raise NotQueued(player=participant.mention)
        if self.captain_for(participant) is not None:
            raise AlreadyCaptain(player=participant.mention)
        if not self.captain_a:
            side = TeamSide.A
        elif not self.captain_b:
            side = TeamSide.B
        else:
            raise CaptainsTaken()

        captain = Captain(participant, side)
        if side is TeamSide.A:
            self.captain_a = captain
        else:
            self.captain_b = captain
        self.team(side).members.insert(0, participant)

        if self.captains_set:
            self.current_picker = self.captain_a
        return captain

    # ==========================================================================
    # Picks
    # ==========================================================================

    def pick(
        self, actor: Participant, target: Participant, queued: list[Participant]
    ) -> Team:
        """
        Add `target` to the acting captain's team and pass the turn.

        Args:
            actor: Captain making the pick.
            target: Participant being picked.
            queued: Current queue members.

        Returns:
            The team the target joined.

        Raises:
            NotQueued: The target is not in the queue.
            AlreadyOnTeam: The target has already been picked.
            NotCaptain: The actor is not a captain.
            WrongTurn: The other captain holds the pick.
        """
        if target not in queued:
            raise NotQueued(player=target.mention)
        if self.team_of(target) is not None:
            raise AlreadyOnTeam(player=target.mention)
        captain = self.captain_for(actor)
        if captain is None:
            raise NotCaptain(player=actor.mention)
        picker = self.current_picker
        if not isinstance(picker, Captain) or picker.participant != actor:
            waiting_on = picker.participant.mention if isinstance(picker, Captain) else ""
            raise WrongTurn(player=actor.mention, picker=waiting_on)

        team = self.team(captain.side)
        team.members.append(target)
        self.current_picker = self.captain(captain.side.other)
        return team
