"""Main server class that ties everything together."""

import asyncio
import logging

from ..auth.access import AccessControl
from ..auth.auth import AuthManager
from ..config import BotConfig
from ..messages.localization import Localization
from ..network.websocket_server import ClientConnection, WebSocketServer
from ..persistence.store import RIOT_IDS, TEAM_NAMES, JsonStore
from ..session.controller import MatchSetup
from ..session.map_pool import MapPool
from ..session.participant import Participant
from ..session.state import ScrimState
from ..transport.websocket_transport import WebSocketChatTransport
from .autoclear import AutoclearScheduler
from .commands import CommandDispatcher, parse_command

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def load_state(store: JsonStore) -> ScrimState:
    """Build the shared state from the persisted tables."""
    state = ScrimState(
        pool=MapPool.from_names(store.load_maps()),
        riot_ids=store.load_cache(RIOT_IDS),
        team_names=store.load_cache(TEAM_NAMES),
    )
    logger.info(
        "Loaded %d maps, %d Riot ids, %d team names",
        len(state.pool),
        len(state.riot_ids),
        len(state.team_names),
    )
    return state


class Server:
    """
    Scrim bot server.

    Coordinates the chat network, the match setup controller, persistence
    and the autoclear schedule.
    """

    def __init__(self, config: BotConfig):
        self.config = config
        self._store = JsonStore(config.data_dir)
        self._access = AccessControl(config.admin_ids)
        self._auth: AuthManager | None = None
        self._state: ScrimState | None = None
        self._ws_server: WebSocketServer | None = None
        self._transport: WebSocketChatTransport | None = None
        self._setup: MatchSetup | None = None
        self._dispatcher: CommandDispatcher | None = None
        self._autoclear: AutoclearScheduler | None = None
        self._tasks: set[asyncio.Task] = set()

        # Everyone who has identified since startup, for resolving mentions
        self._participants: dict[str, Participant] = {}  # id -> Participant

    async def start(self) -> None:
        logger.info("Starting scrimbot v%s...", VERSION)

        if self.config.locale not in Localization.available_locales():
            logger.warning("No catalog for locale %s, falling back to English", self.config.locale)
        self._state = load_state(self._store)
        self._auth = AuthManager(self._store, reserved_ids=self.config.admin_ids)
        self._ws_server = WebSocketServer(
            host=self.config.host,
            port=self.config.port,
            on_connect=self._on_client_connect,
            on_disconnect=self._on_client_disconnect,
            on_message=self._on_client_message,
            ssl_cert=self.config.ssl_cert,
            ssl_key=self.config.ssl_key,
        )
        self._transport = WebSocketChatTransport(self._ws_server)
        self._setup = MatchSetup(self._state, self._transport, self._store, self.config)
        self._dispatcher = CommandDispatcher(self._setup, self._access)
        await self._ws_server.start()

        if self.config.autoclear_hour is not None:
            self._autoclear = AutoclearScheduler(self._setup, self.config.autoclear_hour)
            self._autoclear.start()

    async def stop(self) -> None:
        logger.info("Stopping server...")
        if self._autoclear:
            await self._autoclear.stop()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._ws_server:
            await self._ws_server.stop()
        logger.info("Server stopped.")

    async def _on_client_connect(self, client: ClientConnection) -> None:
        logger.info("Client connected: %s", client.address)

    async def _on_client_disconnect(self, client: ClientConnection) -> None:
        logger.info("Client disconnected: %s", client.address)

    async def _on_client_message(self, client: ClientConnection, packet: dict) -> None:
        """Handle incoming packet from a client."""
        packet_type = packet.get("type")

        if packet_type == "identify":
            await self._handle_identify(client, packet)
        elif packet_type == "ping":
            await client.send({"type": "pong"})
        elif not client.identified:
            # Ignore everything else until the client says who it is
            return
        elif packet_type == "command":
            self._handle_command(client, packet)
        elif packet_type in ("react", "unreact"):
            self._handle_reaction(client, packet, added=packet_type == "react")

    async def _handle_identify(self, client: ClientConnection, packet: dict) -> None:
        if client.identified:
            await client.send({"type": "error", "reason": "Already identified"})
            return

        participant_id = str(packet.get("id", "")).strip()
        password = str(packet.get("password", ""))
        if not participant_id or not password:
            await client.send(
                {
                    "type": "disconnect",
                    "reason": "Missing participant id or password",
                    "reconnect": False,
                }
            )
            return

        # Try to authenticate or register
        if not self._auth.authenticate(participant_id, password):
            if not self._auth.register(participant_id, password):
                logger.warning("Rejected credentials for %s from %s", participant_id, client.address)
                await client.send(
                    {
                        "type": "disconnect",
                        "reason": "Invalid credentials",
                        "reconnect": False,
                    }
                )
                return

        # One live connection per participant: the newest one wins
        previous = self._ws_server.get_client_by_participant(participant_id)
        if previous is not None and previous is not client:
            logger.info("%s signed in again from %s", participant_id, client.address)
            previous.participant = None
            await previous.send(
                {
                    "type": "disconnect",
                    "reason": "Signed in from another connection",
                    "reconnect": False,
                }
            )
            await previous.close()

        participant = Participant(participant_id, str(packet.get("name", "")).strip())
        client.participant = participant
        self._participants[participant.id] = participant
        await client.send(
            {
                "type": "identify_success",
                "id": participant.id,
                "name": participant.name,
                "version": VERSION,
            }
        )

    def _resolve_mentions(self, ids: list) -> list[Participant]:
        mentions = []
        for participant_id in ids:
            participant = self._participants.get(str(participant_id))
            if participant is None:
                logger.debug("Ignoring mention of unknown participant %s", participant_id)
                continue
            mentions.append(participant)
        return mentions

    def _handle_command(self, client: ClientConnection, packet: dict) -> None:
        """Parse a chat command and run it in its own task."""
        command = parse_command(
            str(packet.get("text", "")),
            client.participant,
            self._resolve_mentions(packet.get("mentions") or []),
        )
        if command is None:
            return
        # A running map vote keeps its task alive for the whole window
        task = asyncio.create_task(self._dispatcher.dispatch(command))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Command failed", exc_info=task.exception())

    def _handle_reaction(self, client: ClientConnection, packet: dict, added: bool) -> None:
        vote_id = str(packet.get("vote_id", ""))
        token = str(packet.get("token", "")).strip().lower()
        if not token:
            return
        if not self._transport.record_reaction(vote_id, token, client.participant, added):
            logger.debug("Reaction for closed vote %s from %s", vote_id, client.participant.id)


async def run_server(config: BotConfig) -> None:
    """Run the server until interrupted.

    Args:
        config: Loaded bot configuration.
    """
    server = Server(config)
    await server.start()

    try:
        while True:
            await asyncio.sleep(1)
    finally:
        await server.stop()
