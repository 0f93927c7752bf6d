"""WebSocket chat server that participants connect to."""

import json
import logging
import ssl
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Coroutine

import websockets
from websockets.asyncio.server import Server as _WSServer, ServerConnection, serve

from ..session.participant import Participant

logger = logging.getLogger(__name__)


@dataclass
class ClientConnection:
    """A connected chat client and the participant it identified as."""

    websocket: ServerConnection
    address: str
    participant: Participant | None = None

    @property
    def identified(self) -> bool:
        return self.participant is not None

    async def send(self, packet: dict) -> bool:
        """Send a packet to this client. Returns False if the connection is gone."""
        try:
            await self.websocket.send(json.dumps(packet))
        except websockets.exceptions.ConnectionClosed:
            return False
        return True

    async def close(self) -> None:
        try:
            await self.websocket.close()
        except websockets.exceptions.WebSocketException as e:
            logger.debug("Error closing %s: %s", self.address, e)


class WebSocketServer:
    """
    Async WebSocket server for chat clients.

    Incoming packets are decoded from JSON and handed to `on_message`;
    malformed packets are dropped.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 8000,
        on_connect: Callable[[ClientConnection], Coroutine] | None = None,
        on_disconnect: Callable[[ClientConnection], Coroutine] | None = None,
        on_message: Callable[[ClientConnection, dict], Coroutine] | None = None,
        ssl_cert: str | Path | None = None,
        ssl_key: str | Path | None = None,
    ):
        self.host = host
        self.port = port
        self._on_connect = on_connect
        self._on_disconnect = on_disconnect
        self._on_message = on_message
        self._clients: dict[str, ClientConnection] = {}
        self._server: _WSServer | None = None
        self._ssl_context = None

        if ssl_cert and ssl_key:
            self._ssl_context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
            self._ssl_context.load_cert_chain(str(ssl_cert), str(ssl_key))

    async def start(self) -> None:
        self._server = await serve(
            self._handle_client,
            self.host,
            self.port,
            ssl=self._ssl_context,
        )
        protocol = "wss" if self._ssl_context else "ws"
        logger.info("WebSocket server started on %s://%s:%s", protocol, self.host, self.port)

    async def stop(self) -> None:
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

        for client in list(self._clients.values()):
            await client.close()
        self._clients.clear()

    async def _handle_client(self, websocket: ServerConnection) -> None:
        remote = websocket.remote_address
        address = f"{remote[0]}:{remote[1]}" if remote else str(id(websocket))
        client = ClientConnection(websocket=websocket, address=address)
        self._clients[address] = client

        try:
            if self._on_connect:
                await self._on_connect(client)

            async for message in websocket:
                try:
                    packet = json.loads(message)
                except json.JSONDecodeError:
                    logger.debug("Ignoring malformed packet from %s", address)
                    continue
                if isinstance(packet, dict) and self._on_message:
                    await self._on_message(client, packet)

        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            self._clients.pop(address, None)
            if self._on_disconnect:
                await self._on_disconnect(client)

    async def broadcast(self, packet: dict) -> int:
        """Send a packet to every identified client. Returns how many received it."""
        delivered = 0
        for client in list(self._clients.values()):
            if client.identified and await client.send(packet):
                delivered += 1
        return delivered

    async def send_to_participant(self, participant_id: str, packet: dict) -> bool:
        """Send a packet to the client a participant is connected from."""
        client = self.get_client_by_participant(participant_id)
        if client is None:
            return False
        return await client.send(packet)

    def get_client_by_participant(self, participant_id: str) -> ClientConnection | None:
        for client in self._clients.values():
            if client.participant is not None and client.participant.id == participant_id:
                return client
        return None
