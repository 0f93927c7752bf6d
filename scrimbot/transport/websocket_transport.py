"""ChatTransport backed by the websocket chat server."""

import logging
import uuid

from ..network.websocket_server import WebSocketServer
from ..session.errors import TransportError
from ..session.participant import Participant
from ..session.vote import VoteHandle, VoteOption
from .base import ChatTransport

logger = logging.getLogger(__name__)


class WebSocketChatTransport(ChatTransport):
    """
    Delivers match setup output to every identified websocket client.

    Votes are collected from `react` / `unreact` packets: each participant
    counts once per token, and any token is accepted so stray reactions
    reach the tally (which ignores them).
    """

    def __init__(self, server: WebSocketServer):
        self._server = server
        self._votes: dict[str, dict[str, set[str]]] = {}  # vote id -> token -> participant ids

    async def announce(self, text: str) -> None:
        delivered = await self._server.broadcast({"type": "speak", "text": text})
        logger.debug("Announced to %d clients: %s", delivered, text.splitlines()[0] if text else "")

    async def open_vote(self, options: list[VoteOption]) -> VoteHandle:
        vote_id = uuid.uuid4().hex[:8]
        self._votes[vote_id] = {option.token: set() for option in options}
        await self._server.broadcast(
            {
                "type": "vote",
                "vote_id": vote_id,
                "options": [
                    {"token": option.token, "label": option.map_name} for option in options
                ],
            }
        )
        return VoteHandle(vote_id, tuple(options))

    async def read_vote_result(self, handle: VoteHandle) -> dict[str, int]:
        reactions = self._votes.pop(handle.vote_id, None)
        if reactions is None:
            raise TransportError(operation="read_vote", vote_id=handle.vote_id)
        await self._server.broadcast({"type": "vote_closed", "vote_id": handle.vote_id})
        return {token: len(voters) for token, voters in reactions.items()}

    async def relocate(self, participant: Participant, destination: str) -> None:
        sent = await self._server.send_to_participant(
            participant.id, {"type": "relocate", "channel": destination}
        )
        if not sent:
            raise TransportError(operation="relocate", player=participant.mention)

    def record_reaction(
        self, vote_id: str, token: str, participant: Participant, added: bool = True
    ) -> bool:
        """
        Add or remove a participant's reaction on an open vote.

        Returns:
            False if the vote is not open.
        """
        reactions = self._votes.get(vote_id)
        if reactions is None:
            return False
        voters = reactions.setdefault(token, set())
        if added:
            voters.add(participant.id)
        else:
            voters.discard(participant.id)
        return True
