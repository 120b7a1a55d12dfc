"""
Asyncio relay server for the shared Minesweeper board.

Every client shares one engine. Requests are validated and forwarded;
every engine event is broadcast to all connected clients. The event loop
is the only thread touching the engine.
"""
import asyncio
import logging
from typing import List, Optional, Set

from minefield import (
    AsyncioScheduler,
    CellDiff,
    Ended,
    GameConfig,
    GameEngine,
    PythonRandom,
    Snapshot,
)

from . import protocol

logger = logging.getLogger(__name__)

# Longest accepted client line in bytes
LINE_LIMIT = 4096

# Unsent bytes a client may fall behind by before it is dropped
WRITE_BUFFER_LIMIT = 1024 * 1024


class RelayServer:
    """Forwards client requests into a GameEngine and relays its events."""

    def __init__(self, engine: GameEngine, host: str = "127.0.0.1", port: int = 3000) -> None:
        self.engine = engine
        self.host = host
        self.port = port
        self._clients: Set[asyncio.StreamWriter] = set()
        self._server: Optional[asyncio.AbstractServer] = None

        engine.on_started(self._relay_started)
        engine.on_update(self._relay_update)
        engine.on_restart_countdown(self._relay_countdown)

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def start(self) -> None:
        """Bind the listening socket."""
        self._server = await asyncio.start_server(
            self._handle_client, self.host, self.port, limit=LINE_LIMIT
        )
        # Port 0 binds an ephemeral port; report the real one
        self.port = self._server.sockets[0].getsockname()[1]
        logger.info(f"Minesweeper relay listening on {self.host}:{self.port}")

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        await self._server.serve_forever()

    async def close(self) -> None:
        """Stop accepting clients, disconnect everyone and stop the countdown."""
        self.engine.close()
        server, self._server = self._server, None
        if server is not None:
            server.close()
        # wait_closed also waits for open connections
        for writer in list(self._clients):
            writer.close()
        self._clients.clear()
        if server is not None:
            await server.wait_closed()

    @property
    def client_count(self) -> int:
        return len(self._clients)

    # ========================================================================
    # Client Handling
    # ========================================================================

    async def _handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        peer = writer.get_extra_info("peername")
        logger.info(f"Client connected: {peer}")
        self._clients.add(writer)
        writer.write(protocol.loaded_event(self.engine.load_snapshot()))

        try:
            while True:
                try:
                    line = await reader.readline()
                except ValueError:
                    logger.warning(f"Client {peer} sent an oversized line, disconnecting")
                    break
                if not line:
                    break
                if line.strip():
                    self.handle_line(line)
        except ConnectionError as error:
            logger.info(f"Client {peer} connection lost: {error}")
        finally:
            self._clients.discard(writer)
            writer.close()
            logger.info(f"Client disconnected: {peer}")

    def handle_line(self, line: bytes) -> List[CellDiff]:
        """
        Decode one client line and apply it to the engine.

        Malformed lines and invalid coordinates are dropped. A subscriber
        raising while the engine emits is logged, not propagated, so one
        broken observer cannot disconnect the client that sent the line.

        Returns:
            The diff produced by the engine, empty if nothing changed.
        """
        try:
            request = protocol.decode_request(line)
        except protocol.ProtocolError as error:
            logger.warning(f"Dropping client message: {error}")
            return []

        if not self.engine.is_valid_coordinate(request.x, request.y):
            logger.debug(f"Dropping {request.action} at ({request.x!r}, {request.y!r})")
            return []

        action = self.engine.open if request.action == "open" else self.engine.flag
        try:
            return action(request.x, request.y)
        except Exception:
            # The engine has already applied the action; only a subscriber failed
            logger.exception(
                f"Subscriber failed during {request.action} "
                f"at ({request.x!r}, {request.y!r})"
            )
            return []

    # ========================================================================
    # Event Relay
    # ========================================================================

    def _broadcast(self, data: bytes) -> None:
        for writer in list(self._clients):
            if writer.is_closing():
                self._clients.discard(writer)
                continue
            if writer.transport.get_write_buffer_size() > WRITE_BUFFER_LIMIT:
                peer = writer.get_extra_info("peername")
                logger.warning(f"Client {peer} is not reading, disconnecting")
                self._clients.discard(writer)
                writer.close()
                continue
            writer.write(data)

    def _relay_started(self, snapshot: Snapshot) -> None:
        self._broadcast(protocol.started_event(snapshot))

    def _relay_update(self, diff: List[CellDiff], ended: Optional[Ended]) -> None:
        self._broadcast(protocol.update_event(diff, ended))

    def _relay_countdown(self, seconds_left: int) -> None:
        self._broadcast(protocol.countdown_event(seconds_left))


async def run_server(
    config: GameConfig,
    host: str = "127.0.0.1",
    port: int = 3000,
    seed: Optional[int] = None,
) -> None:
    """Build an engine on the running loop and serve it until cancelled."""
    engine = GameEngine(
        config,
        rng=PythonRandom(seed),
        scheduler=AsyncioScheduler(),
    )
    server = RelayServer(engine, host, port)
    await server.start()
    try:
        await server.serve_forever()
    finally:
        await server.close()
