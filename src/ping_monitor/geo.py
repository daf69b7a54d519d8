from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import httpx

from . import config
from .http_check import get_text

logger = logging.getLogger(__name__)


@dataclass
class GeoCacheEntry:
    ip: str
    country: str
    resolved_at: float


class GeoResolver:
    """Public IP and country lookups, with countries cached per IP.

    Stale entries are not removed, only overwritten by the next successful
    lookup for the same IP. The cache has no size bound.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
        ttl: float = config.COUNTRY_CACHE_TTL_SECONDS,
    ):
        self.client = client
        self.clock = clock
        self.ttl = ttl
        self._cache: Dict[str, GeoCacheEntry] = {}

    async def resolve_public_ip(self) -> Optional[str]:
        body = await get_text(
            config.PUBLIC_IP_URL, self.client, require_success=True
        )
        ip = body.strip() if body else ""
        if not ip:
            logger.info("public IP lookup returned nothing")
            return None
        return ip

    async def resolve_country(self, ip: str) -> Optional[str]:
        now = self.clock()
        cached = self._cache.get(ip)
        if cached is not None and now - cached.resolved_at < self.ttl:
            return cached.country

        body = await get_text(
            config.GEO_IP_URL_TEMPLATE.format(ip=ip), self.client, require_success=True
        )
        if body is None:
            return None
        try:
            data = json.loads(body)
        except (ValueError, RecursionError):
            logger.info("geo lookup for %s returned malformed JSON", ip)
            return None
        if not isinstance(data, dict):
            return None

        country = data.get("country")
        if isinstance(country, str) and country:
            result = country
        elif data.get("bogon") is True:
            result = config.BOGON_COUNTRY
        else:
            logger.info("geo lookup for %s has no country", ip)
            return None

        self._cache[ip] = GeoCacheEntry(ip, result, self.clock())
        return result
