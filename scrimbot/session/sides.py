"""Starting side selection by captain B."""

from .draft import Captain
from .errors import NotCaptainB
from .participant import Participant
from .phases import Side
from .state import Session


def choose_side(session: Session, actor: Participant, side: Side) -> Side:
    """
    Record the side team B starts on.

    Only team B's captain may choose; team A takes the opposite side.

    Raises:
        NotCaptainB: The actor is not captain B.
    """
    captain_b = session.draft.captain_b
    if not isinstance(captain_b, Captain) or captain_b.participant != actor:
        raise NotCaptainB(player=actor.mention)
    session.starting_side = side
    return side
