import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Optional

import httpx

from ..ports.cache import ShortLivedStore
from ...exceptions import NotFoundError, ServerError

logger = logging.getLogger(__name__)

CACHE_KEY_COUNTRY_LIST = "locale_country_list"
COUNTRY_LIST_TTL = timedelta(days=30)


@dataclass(frozen=True)
class CountryInfo:
    name: str
    nationality: str
    code: str
    dial_code: str


@dataclass
class LocaleService:
    """Country lookup by ISO alpha-2 code, backed by a cached remote list."""

    cache: ShortLivedStore
    country_list_url: str
    timeout_seconds: float = 10.0
    transport: Optional[httpx.AsyncBaseTransport] = None

    async def get_country_info(self, alpha2_code: str) -> CountryInfo:
        countries = None
        try:
            countries = await self.cache.get(CACHE_KEY_COUNTRY_LIST)
        except Exception as e:
            logger.info(f"Country list not in cache ({e}); downloading")
        if not isinstance(countries, dict):
            countries = await self._download()
            try:
                await self.cache.set(CACHE_KEY_COUNTRY_LIST, countries, COUNTRY_LIST_TTL)
            except Exception as e:
                logger.warning(f"Error caching country list: {e}")

        country = countries.get(alpha2_code.lower())
        if not country:
            raise NotFoundError("locale")
        return CountryInfo(**country)

    async def _download(self) -> Dict[str, dict]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = await client.get(self.country_list_url)
        except httpx.HTTPError as e:
            raise ServerError("error connecting to country list url", e) from e
        if response.status_code != 200:
            raise ServerError(f"error getting countries: {response.status_code}")
        try:
            rows = response.json()
        except ValueError as e:
            raise ServerError("invalid country list", e) from e
        if not isinstance(rows, list):
            raise ServerError("invalid country list")

        countries: Dict[str, dict] = {}
        for row in rows:
            if not isinstance(row, dict):
                continue
            code = row.get("alpha_2_code")
            if not isinstance(code, str) or not code:
                continue
            countries[code.lower()] = {
                "name": row.get("en_short_name", ""),
                "nationality": row.get("nationality", ""),
                "code": code,
                "dial_code": row.get("dial_code", ""),
            }
        return countries
