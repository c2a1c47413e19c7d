"""Single database connection attempt that never raises."""
import inspect

from app.core.capabilities import CapabilityRegistry
from app.core.logging_config import get_logger

logger = get_logger(__name__)


async def negotiate_connection(registry: CapabilityRegistry) -> bool:
    """Return True when the connector loaded and its call succeeded."""
    logger.info("[Startup] Attempting MongoDB connection...")
    connect = registry.get("connector")
    if connect is None:
        logger.warning("[Startup] MongoDB connection module not available")
        logger.info("[Startup] Starting server in fallback mode without database...")
        return False

    try:
        result = connect()
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.warning(f"[Startup] MongoDB connection failed: {e}")
        logger.info("[Startup] Starting server in fallback mode without database...")
        return False

    logger.info("[Startup] MongoDB connected successfully")
    return True
