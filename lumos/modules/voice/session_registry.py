"""Thread-safe registry of open voice connections, keyed by connection id."""
import threading
import time
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)
_lock = threading.Lock()
_registry: Dict[str, "VoiceConnection"] = {}


@dataclass
class VoiceConnection:
    connection_id: str
    websocket: Any
    user_id: Optional[str] = None
    db_session_id: Optional[str] = None
    started_at: float = field(default_factory=time.monotonic)
    last_activity: float = field(default_factory=time.monotonic)

    def touch(self):
        self.last_activity = time.monotonic()

    def idle_seconds(self, now: Optional[float] = None) -> float:
        return (now if now is not None else time.monotonic()) - self.last_activity


def register(connection: VoiceConnection) -> None:
    with _lock:
        _registry[connection.connection_id] = connection
        logger.debug(f"Registered voice connection {connection.connection_id}")


def unregister(connection_id: str) -> Optional[VoiceConnection]:
    with _lock:
        connection = _registry.pop(connection_id, None)
    if connection is not None:
        logger.debug(f"Unregistered voice connection {connection_id}")
    return connection


def get_connection(connection_id: str) -> Optional[VoiceConnection]:
    with _lock:
        return _registry.get(connection_id)


def active_count() -> int:
    with _lock:
        return len(_registry)


def idle_connections(max_idle_seconds: float, now: Optional[float] = None) -> List[VoiceConnection]:
    with _lock:
        connections = list(_registry.values())
    return [c for c in connections if c.idle_seconds(now) > max_idle_seconds]


def clear() -> None:
    with _lock:
        _registry.clear()
