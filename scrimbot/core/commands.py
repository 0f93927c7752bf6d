"""
Chat command parsing and dispatch.

Chat text starting with "." is a command. The first word selects the
intent; the rest of the text and any mentioned participants are passed to
the matching MatchSetup operation. Failures are reported back to the
invoker in the channel.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable

from ..auth.access import AccessControl
from ..session.controller import MatchSetup
from ..session.errors import NotAdmin, ScrimError
from ..session.participant import Participant
from ..session.phases import Side

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "."


class Intent(str, Enum):
    JOIN = "join"
    LEAVE = "leave"
    LIST = "list"
    START = "start"
    RIOT_ID = "riotid"
    MAPS = "maps"
    KICK = "kick"
    ADD_MAP = "addmap"
    CANCEL = "cancel"
    REMOVE_MAP = "removemap"
    CAPTAIN = "captain"
    TEAM_NAME = "teamname"
    PICK = "pick"
    DEFENSE = "defense"
    ATTACK = "attack"
    RECOVER_QUEUE = "recoverqueue"
    CLEAR = "clear"
    HELP = "help"
    UNKNOWN = "unknown"


ADMIN_INTENTS = frozenset(
    {
        Intent.START,
        Intent.KICK,
        Intent.ADD_MAP,
        Intent.REMOVE_MAP,
        Intent.RECOVER_QUEUE,
        Intent.CLEAR,
        Intent.CANCEL,
    }
)

_INTENTS_BY_WORD = {
    COMMAND_PREFIX + intent.value: intent for intent in Intent if intent is not Intent.UNKNOWN
}


@dataclass
class Command:
    """A parsed chat command."""

    intent: Intent
    actor: Participant
    argument: str = ""  # Text after the command word
    mentions: list[Participant] = field(default_factory=list)

    @property
    def target(self) -> Participant | None:
        """First mentioned participant, if any."""
        return self.mentions[0] if self.mentions else None


def parse_command(
    text: str, actor: Participant, mentions: list[Participant] | None = None
) -> Command | None:
    """
    Parse chat text into a Command.

    Returns:
        None if the text is not a command. Text that starts with the prefix
        but names no known command parses as Intent.UNKNOWN.
    """
    stripped = text.strip()
    if not stripped.startswith(COMMAND_PREFIX):
        return None
    word, _, rest = stripped.partition(" ")
    intent = _INTENTS_BY_WORD.get(word.lower(), Intent.UNKNOWN)
    return Command(intent, actor, rest.strip(), list(mentions or []))


Handler = Callable[[Command, bool], Awaitable[object]]


class CommandDispatcher:
    """Routes parsed commands to MatchSetup, enforcing admin-only intents."""

    def __init__(self, setup: MatchSetup, access: AccessControl):
        self.setup = setup
        self.access = access
        self._handlers: dict[Intent, Handler] = {
            Intent.JOIN: lambda c, _: setup.join(c.actor),
            Intent.LEAVE: lambda c, _: setup.leave(c.actor),
            Intent.LIST: lambda c, _: setup.list_queue(),
            Intent.START: lambda c, _: setup.start(c.actor),
            Intent.RIOT_ID: lambda c, _: setup.set_riot_id(c.actor, c.argument),
            Intent.MAPS: lambda c, _: setup.list_maps(),
            Intent.KICK: lambda c, _: setup.kick(c.actor, c.target),
            Intent.ADD_MAP: lambda c, _: setup.add_map(c.actor, c.argument),
            Intent.CANCEL: lambda c, _: setup.cancel(c.actor),
            Intent.REMOVE_MAP: lambda c, _: setup.remove_map(c.actor, c.argument),
            Intent.CAPTAIN: lambda c, _: setup.claim_captain(c.actor),
            Intent.TEAM_NAME: lambda c, _: setup.set_team_name(c.actor, c.argument),
            Intent.PICK: lambda c, _: setup.pick(c.actor, c.target),
            Intent.DEFENSE: lambda c, _: setup.choose_side(c.actor, Side.DEFENSE),
            Intent.ATTACK: lambda c, _: setup.choose_side(c.actor, Side.ATTACK),
            Intent.RECOVER_QUEUE: lambda c, _: setup.recover_queue(c.actor, c.mentions),
            Intent.CLEAR: lambda c, _: setup.clear(c.actor),
            Intent.HELP: lambda c, is_admin: setup.help(is_admin),
            Intent.UNKNOWN: lambda c, _: setup.unknown_command(),
        }

    async def dispatch(self, command: Command) -> None:
        """Run a command, reporting any ScrimError to the invoker."""
        actor = command.actor
        is_admin = self.access.is_admin(actor)
        logger.debug("Dispatching %s from %s", command.intent.value, actor.id)
        try:
            if command.intent in ADMIN_INTENTS and not is_admin:
                raise NotAdmin(command=command.intent.value)
            await self._handlers[command.intent](command, is_admin)
        except ScrimError as e:
            await self.setup.report_error(actor, e)
