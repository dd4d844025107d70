"""
Process-wide aiohttp session for classifier calls.

The app lifespan opens it at startup and closes it at shutdown. Adapters
borrow it per call through `request_session()`; one video fans out into a
classifier call per frame, so they all share one connection pool.

Outside the lifespan (unit tests, one-off scripts) `request_session()`
opens a short-lived session for the call and closes it afterwards.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp

from app.config import settings

logger = logging.getLogger(__name__)

_session: Optional[aiohttp.ClientSession] = None


def _open_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=settings.http_timeout_sec),
        connector=aiohttp.TCPConnector(limit=settings.http_connection_limit),
    )


def is_open() -> bool:
    return _session is not None and not _session.closed


async def initialize() -> None:
    global _session
    if is_open():
        return
    _session = _open_session()
    logger.info(
        f"[STARTUP] Classifier HTTP session opened "
        f"(timeout={settings.http_timeout_sec}s, connections={settings.http_connection_limit})"
    )


async def close() -> None:
    global _session
    if is_open():
        await _session.close()
        logger.info("[SHUTDOWN] Classifier HTTP session closed")
    _session = None


@asynccontextmanager
async def request_session() -> AsyncIterator[aiohttp.ClientSession]:
    """Yield the lifespan session, or a temporary one closed on exit."""
    if is_open():
        yield _session
        return

    temporary = _open_session()
    try:
        yield temporary
    finally:
        await temporary.close()
