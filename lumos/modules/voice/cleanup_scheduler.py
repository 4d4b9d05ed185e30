import asyncio
import logging
from typing import Optional

from lumos.config import settings
from lumos.modules.voice import session_registry

logger = logging.getLogger(__name__)


async def close_idle_connections(max_idle_seconds: Optional[float] = None, now: Optional[float] = None) -> int:
    """Close and drop voice connections idle longer than the limit. Returns how many were removed."""
    if max_idle_seconds is None:
        max_idle_seconds = settings.voice_session_idle_minutes * 60
    idle = session_registry.idle_connections(max_idle_seconds, now)
    if not idle:
        logger.debug("No idle voice connections found")
        return 0
    logger.info(f"Closing {len(idle)} idle voice connection(s)")
    for connection in idle:
        try:
            await connection.websocket.close()
        except Exception as e:
            logger.warning(f"Error closing voice connection {connection.connection_id}: {e}")
        finally:
            session_registry.unregister(connection.connection_id)
    return len(idle)


async def voice_cleanup_loop():
    """Background task that periodically drops idle voice connections"""
    while True:
        try:
            await close_idle_connections()
        except Exception as e:
            logger.error(f"Error in voice cleanup loop: {str(e)}")

        await asyncio.sleep(settings.voice_cleanup_interval_seconds)
