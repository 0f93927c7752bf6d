"""
Match setup controller.

MatchSetup is the state machine driving one session through
Queue -> MapVote -> CaptainPick -> Draft -> SidePick -> Ready -> Queue.
Each public coroutine is one command: it takes the state lock, checks the
phase, mutates the shared state and announces the outcome. Failures are
raised as ScrimError subclasses before anything is mutated; announcement
failures are logged and never undo a committed change.
"""

import asyncio
import logging
import random
import re
from typing import Awaitable, Callable

from ..config import BotConfig
from ..messages.localization import Localization
from ..persistence.store import RIOT_IDS, TEAM_NAMES, JsonStore
from ..transport.base import ChatTransport
from .draft import Captain, Team, TeamSide
from .errors import (
    InvalidRiotId,
    InvalidTeamName,
    MissingArgument,
    MissingMention,
    NotQueued,
    QueueNotFull,
    RiotIdRequired,
    ScrimError,
    TransportError,
    ValidationError,
    WrongPhase,
)
from .participant import Participant
from .phases import Phase, Side
from .sides import choose_side
from .state import ScrimState, Session
from .vote import (
    VoteHandle,
    VoteOption,
    VoteOutcome,
    VoteWindow,
    assign_tokens,
    resolve_vote,
    tally_votes,
)

logger = logging.getLogger(__name__)

RIOT_ID_PATTERN = re.compile(r"\w+#\w+")
TEAM_NAME_MAX_LENGTH = 18


class MatchSetup:
    """
    Session state machine for scrim setup.

    Args:
        state: Shared state bundle; its lock serializes every command.
        transport: Chat transport used for announcements, votes and moves.
        store: Persistence for Riot ids, team names and the map pool.
            Nothing is persisted when omitted.
        config: Bot configuration (vote timings, channels, locale).
        rng: Random source for vote tie-breaks.
        sleep: Coroutine used to wait out the vote window.
    """

    def __init__(
        self,
        state: ScrimState,
        transport: ChatTransport,
        store: JsonStore | None = None,
        config: BotConfig | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.state = state
        self.transport = transport
        self.store = store
        self.config = config or BotConfig()
        self.rng = rng or random.Random()
        self.window = VoteWindow(self.config.vote_duration, self.config.vote_notice_at)
        self._sleep = sleep

    # ==========================================================================
    # Messaging helpers
    # ==========================================================================

    def _text(self, message_id: str, **kwargs) -> str:
        return Localization.get(self.config.locale, message_id, **kwargs)

    async def _send(self, text: str) -> None:
        """Announce text; delivery failures are logged, not raised."""
        try:
            await self.transport.announce(text)
        except TransportError as e:
            logger.warning("Error sending message: %s", e)

    async def _say(self, message_id: str, **kwargs) -> None:
        await self._send(self._text(message_id, **kwargs))

    async def report_error(self, actor: Participant, error: ScrimError) -> None:
        """Tell the invoker why their command failed."""
        logger.debug("%s failed for %s: %s", type(error).__name__, actor.id, error)
        await self._send(f"{actor.mention} {self._text(error.message_id, **error.kwargs)}")

    def _persist_cache(self, name: str, cache: dict[str, str]) -> None:
        if self.store is not None:
            self.store.save_cache(name, cache)

    def _persist_maps(self) -> None:
        if self.store is not None:
            self.store.save_maps(list(self.state.pool))

    @staticmethod
    def _bullets(participants: list[Participant]) -> list[str]:
        return [f"- {p.mention}" for p in participants]

    # ==========================================================================
    # Queue
    # ==========================================================================

    async def join(self, actor: Participant) -> int:
        """Add the actor to the queue, returning the new queue size."""
        async with self.state.lock:
            return await self._join(actor)

    async def _join(self, participant: Participant) -> int:
        self.state.session.require("join", Phase.QUEUE)
        if self.config.require_riot_id and participant.id not in self.state.riot_ids:
            raise RiotIdRequired(player=participant.mention)
        queue = self.state.queue
        size = queue.join(participant)
        await self._say(
            "queue-joined", player=participant.mention, size=size, capacity=queue.capacity
        )
        return size

    async def leave(self, actor: Participant) -> int:
        """Remove the actor from the queue, returning the new queue size."""
        async with self.state.lock:
            self.state.session.require("leave", Phase.QUEUE)
            queue = self.state.queue
            size = queue.leave(actor)
            await self._say(
                "queue-left", player=actor.mention, size=size, capacity=queue.capacity
            )
            return size

    async def kick(self, actor: Participant, target: Participant | None) -> int:
        """Remove another participant from the queue (admin)."""
        async with self.state.lock:
            self.state.session.require("kick", Phase.QUEUE)
            if target is None:
                raise MissingMention(command="kick")
            queue = self.state.queue
            size = queue.kick(target)
            logger.info("%s kicked %s from the queue", actor.id, target.id)
            await self._say(
                "queue-kicked", player=target.mention, size=size, capacity=queue.capacity
            )
            return size

    async def clear(self, actor: Participant) -> None:
        """Empty the queue (admin)."""
        async with self.state.lock:
            self.state.session.require("clear", Phase.QUEUE)
            self.state.queue.clear()
            logger.info("%s cleared the queue", actor.id)
            await self._say("queue-cleared", player=actor.mention)

    async def recover_queue(
        self, actor: Participant, targets: list[Participant]
    ) -> list[Participant]:
        """
        Rebuild the queue from a list of participants (admin).

        The queue is emptied, then each target joins in order. A target that
        cannot join is reported and skipped.

        Returns:
            The participants that made it into the queue.
        """
        async with self.state.lock:
            self.state.session.require("recoverqueue", Phase.QUEUE)
            self.state.queue.clear()
            logger.info("%s is recovering the queue with %d players", actor.id, len(targets))
            joined = []
            for target in targets:
                try:
                    await self._join(target)
                except ValidationError as e:
                    await self.report_error(target, e)
                else:
                    joined.append(target)
            players = Localization.format_list_and(
                self.config.locale, [p.mention for p in joined]
            )
            await self._say(
                "queue-recovered",
                player=actor.mention,
                players=players or "-",
                size=len(self.state.queue),
                capacity=self.state.queue.capacity,
            )
            return joined

    async def list_queue(self) -> list[Participant]:
        async with self.state.lock:
            queue = self.state.queue
            members = list(queue)
            lines = [self._text("queue-list", size=len(members), capacity=queue.capacity)]
            lines.extend(self._bullets(members))
            await self._send("\n".join(lines))
            return members

    async def autoclear(self) -> bool:
        """
        Scheduled queue clear.

        Only acts while the session is queueing; a setup in progress is left
        alone until the next scheduled run.

        Returns:
            True if the queue was cleared.
        """
        async with self.state.lock:
            phase = self.state.session.phase
            if phase is not Phase.QUEUE:
                logger.info("Skipping autoclear during %s phase", phase.value)
                return False
            self.state.queue.clear()
            logger.info("Queue cleared by autoclear")
            await self._say("queue-autocleared")
            return True

    # ==========================================================================
    # Map pool
    # ==========================================================================

    async def add_map(self, actor: Participant, name: str) -> None:
        """Add a map to the pool (admin)."""
        parts = name.split()
        if not parts:
            raise MissingArgument(command="addmap", example=".addmap mapname")
        name = parts[0]
        async with self.state.lock:
            self.state.pool.add(name)
            self._persist_maps()
            logger.info("%s added map %s", actor.id, name)
            await self._say("map-added", player=actor.mention, map=name)

    async def remove_map(self, actor: Participant, name: str) -> None:
        """Remove a map from the pool (admin)."""
        parts = name.split()
        if not parts:
            raise MissingArgument(command="removemap", example=".removemap mapname")
        name = parts[0]
        async with self.state.lock:
            self.state.pool.remove(name)
            self._persist_maps()
            logger.info("%s removed map %s", actor.id, name)
            await self._say("map-removed", player=actor.mention, map=name)

    async def list_maps(self) -> list[str]:
        async with self.state.lock:
            maps = list(self.state.pool)
            lines = [self._text("map-pool-header")]
            lines.extend(f"- `{name}`" for name in maps)
            await self._send("\n".join(lines))
            return maps

    # ==========================================================================
    # Player profiles
    # ==========================================================================

    async def set_riot_id(self, actor: Participant, text: str) -> str:
        """Store the actor's Riot id (`name#tag`)."""
        parts = text.split()
        if not parts:
            raise MissingArgument(command="riotid", example=".riotid Martige#NA1")
        riot_id = parts[0]
        if not RIOT_ID_PATTERN.fullmatch(riot_id):
            raise InvalidRiotId(example=".riotid Martige#NA1")
        async with self.state.lock:
            self.state.riot_ids[actor.id] = riot_id
            self._persist_cache(RIOT_IDS, self.state.riot_ids)
            await self._say("riot-id-updated", player=actor.mention, riot_id=riot_id)
            return riot_id

    async def set_team_name(self, actor: Participant, text: str) -> str:
        """Store the team name used when the actor captains a team."""
        team_name = text.strip()
        if not team_name:
            raise MissingArgument(command="teamname", example=".teamname TeamName")
        if len(team_name) > TEAM_NAME_MAX_LENGTH:
            raise InvalidTeamName(over=len(team_name) - TEAM_NAME_MAX_LENGTH)
        async with self.state.lock:
            self.state.team_names[actor.id] = team_name
            self._persist_cache(TEAM_NAMES, self.state.team_names)
            await self._say("team-name-updated", player=actor.mention, team_name=team_name)
            return team_name

    # ==========================================================================
    # Map vote
    # ==========================================================================

    async def start(self, actor: Participant) -> VoteOutcome | None:
        """
        Start match setup with a full queue and run the map vote (admin).

        The state lock is released for the length of the vote window so
        other commands keep working, and re-acquired to read the counts.

        Returns:
            The vote outcome, or None if the setup was cancelled while the
            vote was open.
        """
        async with self.state.lock:
            session = self.state.session
            session.require("start", Phase.QUEUE)
            queue = self.state.queue
            if actor not in queue:
                raise NotQueued(player=actor.mention)
            if not queue.is_full:
                raise QueueNotFull(size=len(queue), capacity=queue.capacity)
            options = assign_tokens(list(self.state.pool))

            session.advance(Phase.MAP_VOTE)
            lines = self._bullets(list(queue))
            lines.append(self._text("setup-starting"))
            await self._send("\n".join(lines))
            lines = [self._text("vote-header")]
            lines.extend(f"[{option.token}] `{option.map_name}`" for option in options)
            await self._send("\n".join(lines))
            handle = await self._open_vote(options)

        async def notice(remaining: float) -> None:
            if self.state.session is session:
                await self._say("vote-closing", seconds=int(remaining))

        await self.window.wait(notice, sleep=self._sleep)

        async with self.state.lock:
            counts = await self._read_vote(handle)
            if self.state.session is not session or session.phase is not Phase.MAP_VOTE:
                logger.info("Discarding map vote result, setup was cancelled")
                return None
            outcome = resolve_vote(tally_votes(options, counts), self.rng)
            session.selected_map = outcome.map_name
            session.advance(Phase.CAPTAIN_PICK)
            logger.info("Map vote tally %s -> %s", outcome.tally, outcome.map_name)
            if outcome.tie_broken:
                await self._say("vote-tied", map=outcome.map_name)
            else:
                await self._say("vote-concluded", map=outcome.map_name)
            await self._say("captain-pick-started")
            return outcome

    async def _open_vote(self, options: list[VoteOption]) -> VoteHandle | None:
        try:
            return await self.transport.open_vote(options)
        except TransportError as e:
            logger.warning("Error opening map vote: %s", e)
            return None

    async def _read_vote(self, handle: VoteHandle | None) -> dict[str, int]:
        if handle is None:
            return {}
        try:
            return await self.transport.read_vote_result(handle)
        except TransportError as e:
            logger.warning("Error reading map vote: %s", e)
            return {}

    # ==========================================================================
    # Captains and draft
    # ==========================================================================

    async def claim_captain(self, actor: Participant) -> Captain:
        """Claim the first free captaincy; the second claim starts the draft."""
        async with self.state.lock:
            session = self.state.session
            session.require("captain", Phase.CAPTAIN_PICK)
            draft = session.draft
            captain = draft.claim_captain(actor, list(self.state.queue))
            if captain.side is TeamSide.A:
                await self._say("captain-a-set", player=actor.mention)
            else:
                await self._say("captain-b-set", player=actor.mention)

            if draft.captains_set:
                session.advance(Phase.DRAFT)
                picker = draft.current_picker
                await self._say(
                    "draft-started",
                    player=picker.participant.mention if isinstance(picker, Captain) else "",
                )
                await self._send(self._board_text())
            return captain

    async def pick(self, actor: Participant, target: Participant | None) -> Team:
        """Pick a queued player for the actor's team; the turn then passes."""
        async with self.state.lock:
            session = self.state.session
            session.require("pick", Phase.DRAFT)
            if target is None:
                raise MissingMention(command="pick")
            draft = session.draft
            queued = list(self.state.queue)
            team = draft.pick(actor, target, queued)
            await self._say(
                "player-picked", player=target.mention, team=self.state.team_name(team.side)
            )
            await self._send(self._board_text())

            if not draft.remaining(queued):
                session.advance(Phase.SIDE_PICK)
                captain_b = draft.captain_b
                await self._say(
                    "side-pick-started",
                    player=captain_b.participant.mention if isinstance(captain_b, Captain) else "",
                )
            return team

    def _board_text(self) -> str:
        """Both teams and the players still to be picked."""
        draft = self.state.session.draft
        lines = [self._text("team-header", team=self.state.team_name(TeamSide.A))]
        lines.extend(self._bullets(draft.team_a.members))
        lines.append(self._text("team-header", team=self.state.team_name(TeamSide.B)))
        lines.extend(self._bullets(draft.team_b.members))
        lines.append(self._text("remaining-header"))
        lines.extend(self._bullets(draft.remaining(list(self.state.queue))))
        return "\n".join(lines)

    # ==========================================================================
    # Side pick and finalization
    # ==========================================================================

    async def choose_side(self, actor: Participant, side: Side) -> Side:
        """Captain B picks team B's starting side, completing the setup."""
        async with self.state.lock:
            session = self.state.session
            session.require(side.value, Phase.SIDE_PICK)
            choose_side(session, actor, side)
            session.advance(Phase.READY)
            await self._finalize(session)
            return side

    async def _finalize(self, session: Session) -> None:
        """
        Announce the teams, move players to their channels and reset.

        The reset is committed before anything is sent.
        """
        draft = session.draft
        riot_ids = self.state.riot_ids
        name_a = self.state.team_name(TeamSide.A)
        name_b = self.state.team_name(TeamSide.B)
        side_b = session.starting_side if isinstance(session.starting_side, Side) else Side.DEFENSE
        team_a = list(draft.team_a.members)
        team_b = list(draft.team_b.members)

        lines = [self._text("team-header", team=name_a)]
        lines.extend(f"- {p.mention}: {riot_ids.get(p.id, '?')}" for p in team_a)
        lines.append(self._text("team-header", team=name_b))
        lines.extend(f"- {p.mention}: {riot_ids.get(p.id, '?')}" for p in team_b)
        teams_text = "\n".join(lines)
        summary = self._text(
            "setup-summary",
            map=session.selected_map if isinstance(session.selected_map, str) else "?",
            team_a=name_a,
            side_a=side_b.opposite.value,
            team_b=name_b,
            side_b=side_b.value,
        )
        moves = [(p, self.config.team_a_channel) for p in team_a]
        moves += [(p, self.config.team_b_channel) for p in team_b]

        session.advance(Phase.QUEUE)
        self.state.queue.clear()
        self.state.reset_session()

        await self._say("setup-completed")
        await self._send(teams_text)
        await self._send(summary)
        if self.config.post_setup_msg:
            await self._send(self.config.post_setup_msg)
        for participant, channel in moves:
            if not channel:
                continue
            try:
                await self.transport.relocate(participant, channel)
            except TransportError as e:
                logger.warning("Cannot move %s to %s: %s", participant.id, channel, e)

    async def cancel(self, actor: Participant) -> None:
        """Abandon the setup in progress and return to queueing (admin)."""
        async with self.state.lock:
            session = self.state.session
            if not session.phase.is_setup:
                raise WrongPhase(command="cancel", phase=session.phase.value)
            logger.info("%s cancelled setup during %s phase", actor.id, session.phase.value)
            logger.debug("Cancelled session: %s", session.snapshot())
            self.state.reset_session()
            await self._say("setup-cancelled", player=actor.mention)

    # ==========================================================================
    # Help
    # ==========================================================================

    async def help(self, is_admin: bool) -> None:
        text = self._text("help-commands")
        if is_admin:
            text = f"{text}\n{self._text('help-admin-commands')}"
        await self._send(text)

    async def unknown_command(self) -> None:
        await self._say("unknown-command")
