import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional

from domain_switcher.models.domain import ProgressEvent

logger = logging.getLogger(__name__)

_CLOSE = object()


class ClientSession:
    """A connected foreground session with its own ordered outbound queue.

    Messages are delivered by a dedicated sender loop, so one slow or broken
    session never holds up delivery to the others.
    """

    def __init__(self, send: Callable[[dict], Awaitable[Any]], session_id: Optional[str] = None):
        self.id = session_id or str(uuid.uuid4())
        self._send = send
        self.queue: asyncio.Queue = asyncio.Queue()
        self.closed = False
        self._stopping = False
        self.on_failure: Optional[Callable[["ClientSession"], None]] = None

    def post(self, message: dict) -> bool:
        if self.closed:
            logger.debug(f"Dropping message for closed session {self.id}")
            return False
        self.queue.put_nowait(message)
        return True

    async def run(self) -> None:
        logger.debug(f"Session {self.id} sender loop started")
        while True:
            message = await self.queue.get()
            try:
                if message is _CLOSE:
                    break
                if self.closed:
                    continue
                await self._send(message)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Failed to deliver message to session {self.id}: {e}")
                self.closed = True
                if self.on_failure is not None:
                    self.on_failure(self)
            finally:
                self.queue.task_done()
        logger.debug(f"Session {self.id} sender loop stopped")

    async def drain(self) -> None:
        await self.queue.join()

    def close(self) -> None:
        if self._stopping:
            return
        self._stopping = True
        self.closed = True
        self.queue.put_nowait(_CLOSE)


class SessionNotifier:
    """Fan-out of progress events to every currently connected session. No replay."""

    def __init__(self):
        logger.debug("Initializing SessionNotifier")
        self.sessions: Dict[str, ClientSession] = {}

    def connect(self, session: ClientSession) -> None:
        session.on_failure = self.disconnect
        self.sessions[session.id] = session
        logger.info(f"Session {session.id} connected ({len(self.sessions)} active)")

    def disconnect(self, session: ClientSession) -> None:
        if self.sessions.pop(session.id, None) is not None:
            logger.info(f"Session {session.id} disconnected ({len(self.sessions)} active)")

    def get_sessions(self) -> List[ClientSession]:
        return list(self.sessions.values())

    async def broadcast(self, event: ProgressEvent) -> int:
        message = event.to_message()
        delivered = 0
        for session in self.get_sessions():
            try:
                if session.post(message):
                    delivered += 1
            except Exception as e:
                logger.warning(f"Failed to queue {message['type']} for session {session.id}: {e}", exc_info=True)
                self.disconnect(session)
        logger.debug(f"Broadcast {message} to {delivered} sessions")
        return delivered

    async def close(self) -> None:
        for session in self.get_sessions():
            session.close()
            self.disconnect(session)
