"""Match setup phases and starting sides."""

from enum import Enum


class Phase(str, Enum):
    """Stages of a match setup, in order."""

    QUEUE = "queue"  # Players join and leave
    MAP_VOTE = "map_vote"  # Timed map vote is open
    CAPTAIN_PICK = "captain_pick"  # Two players claim captaincy
    DRAFT = "draft"  # Captains pick players in turn
    SIDE_PICK = "side_pick"  # Captain B picks a starting side
    READY = "ready"  # Teams are final, announcement pending

    @property
    def next_phases(self) -> list["Phase"]:
        """Phases reachable from this one (cancel excluded)."""
        transitions = {
            Phase.QUEUE: [Phase.MAP_VOTE],
            Phase.MAP_VOTE: [Phase.CAPTAIN_PICK],
            Phase.CAPTAIN_PICK: [Phase.DRAFT],
            Phase.DRAFT: [Phase.SIDE_PICK],
            Phase.SIDE_PICK: [Phase.READY],
            Phase.READY: [Phase.QUEUE],
        }
        return transitions[self]

    def can_transition_to(self, target: "Phase") -> bool:
        return target in self.next_phases

    @property
    def is_setup(self) -> bool:
        """True once `.start` has been accepted and until the session resets."""
        return self is not Phase.QUEUE


class Side(str, Enum):
    """Side a team starts the match on."""

    DEFENSE = "defense"
    ATTACK = "attack"

    @property
    def opposite(self) -> "Side":
        return Side.ATTACK if self is Side.DEFENSE else Side.DEFENSE
