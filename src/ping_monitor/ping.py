from __future__ import annotations

import asyncio
import contextlib
import logging
import re
from typing import Optional

from . import config

logger = logging.getLogger(__name__)

# "PING example.com (93.184.216.34) 56(84) bytes of data."
PING_IP_RE = re.compile(r"\(([^)]+)\)")


class PingResult:
    __slots__ = ("host", "ok", "ip", "error")

    def __init__(
        self, host: str, ok: bool, ip: Optional[str], error: Optional[str]
    ):
        self.host = host
        self.ok = ok
        self.ip = ip
        self.error = error

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"PingResult(host={self.host!r}, ok={self.ok}, ip={self.ip!r}, error={self.error!r})"


def extract_ip(output: str) -> Optional[str]:
    """Return the first parenthesized token of ping output, if any."""
    match = PING_IP_RE.search(output)
    if not match:
        return None
    return match.group(1).strip() or None


async def ping_host(host: str, timeout: int) -> PingResult:
    """Ping a host once using the system 'ping' command.

    Uses: ping -n -c 1 -W {timeout} host
    ok is True only if ping exits with 0 before the deadline. The answering
    address is parsed from the output; a missing address leaves ip=None.
    Failing to start ping at all is reported as down, never raised.
    """
    timeout = max(1, int(timeout))
    try:
        proc = await asyncio.create_subprocess_exec(
            "ping",
            "-n",
            "-c",
            "1",
            "-W",
            str(timeout),
            host,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as exc:
        logger.debug("could not launch ping for %s: %s", host, exc)
        return PingResult(host, False, None, "launch failed")

    try:
        out_bytes = await asyncio.wait_for(
            proc.communicate(), timeout=timeout + config.PING_GRACE_SECONDS
        )
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
            await proc.wait()
        logger.debug("ping %s timed out after %ss", host, timeout)
        return PingResult(host, False, None, "timeout")

    stdout = out_bytes[0].decode(errors="replace")
    if proc.returncode == 0:
        return PingResult(host, True, extract_ip(stdout), None)
    err: str = "timeout" if "100% packet loss" in stdout else "unreachable"
    logger.debug("ping %s failed: %s", host, err)
    return PingResult(host, False, None, err)
