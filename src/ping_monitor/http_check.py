from __future__ import annotations

import logging
from typing import Optional

import httpx

from . import config
from .models import BodyMatch, HttpCheckTarget

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


async def get_text(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    require_success: bool = False,
) -> Optional[str]:
    """GET url past any cache and return the UTF-8 body, or None on any failure.

    With require_success, a non-2xx response also counts as a failure.
    """
    try:
        if client is not None:
            response = await client.get(url, headers=NO_CACHE_HEADERS)
        else:
            async with httpx.AsyncClient() as own_client:
                response = await own_client.get(url, headers=NO_CACHE_HEADERS)
        if require_success and not response.is_success:
            logger.debug("GET %s answered %s", url, response.status_code)
            return None
        return response.content.decode("utf-8")
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.debug("GET %s failed: %s", url, exc)
    except UnicodeDecodeError:
        logger.debug("GET %s returned a non UTF-8 body", url)
    return None


class HttpChecker:
    """Captive-portal style checks: fetch a page and validate its body."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client

    async def check_contains(self, url: str, expected_substring: str) -> bool:
        body = await get_text(url, self.client)
        return body is not None and expected_substring in body

    async def check_equals(self, url: str, expected_body: str) -> bool:
        body = await get_text(url, self.client)
        return body is not None and body.strip() == expected_body

    async def check(self, target: HttpCheckTarget) -> bool:
        if target.match is BodyMatch.EQUALS:
            return await self.check_equals(target.url, target.expected)
        return await self.check_contains(target.url, target.expected)

    async def check_apple(self) -> bool:
        return await self.check_contains(
            config.APPLE_CHECK_URL, config.APPLE_EXPECTED_SUBSTRING
        )

    async def check_microsoft(self) -> bool:
        return await self.check_equals(
            config.MICROSOFT_CHECK_URL, config.MICROSOFT_EXPECTED_BODY
        )
