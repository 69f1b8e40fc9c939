"""
Dev server port auto-detection.

Probes the ports Storybook usually listens on and accepts the first one
that answers and serves a page that looks like Storybook.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

logger = logging.getLogger(__name__)

COMMON_PORTS: tuple[int, ...] = (6006, 6007, 6008, 6009, 9009, 9001, 8080)
DEFAULT_PROBE_TIMEOUT = 1.0


def looks_like_storybook(html: str) -> bool:
    """Whether a page body carries Storybook's fingerprints."""
    return "storybook" in html.lower() or "__STORYBOOK" in html or "sb-" in html


async def probe_port(
    client: httpx.AsyncClient, host: str, port: int, timeout: float = DEFAULT_PROBE_TIMEOUT
) -> bool:
    """Check one port: a successful HEAD, then a GET whose body looks like Storybook."""
    url = f"http://{host}:{port}/"
    try:
        head = await client.head(url, timeout=timeout)
        if not head.is_success:
            return False
        page = await client.get(url, timeout=timeout)
    except httpx.HTTPError as e:
        logger.debug(f"No dev server on {url}: {e}")
        return False
    return page.is_success and looks_like_storybook(page.text)


async def detect_dev_server_port(
    host: str = "localhost",
    ports: tuple[int, ...] = COMMON_PORTS,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> int | None:
    """
    Find the port a Storybook dev server is running on.

    Args:
        host: Host to probe
        ports: Ports to try, in order
        timeout: Per-port timeout in seconds

    Returns:
        The first matching port, or None when nothing matches.
    """
    logger.info(f"Auto-detecting Storybook port on {host}...")
    async with httpx.AsyncClient(follow_redirects=True) as client:
        for port in ports:
            if await probe_port(client, host, port, timeout):
                logger.info(f"Found Storybook running on port {port}")
                return port

    logger.warning("Could not auto-detect Storybook port")
    return None


def detect_dev_server_port_sync(
    host: str = "localhost",
    ports: tuple[int, ...] = COMMON_PORTS,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> int | None:
    """Synchronous version of detect_dev_server_port()."""
    return asyncio.run(detect_dev_server_port(host, ports, timeout))
