"""Base fare lookup collaborators used by the price estimator."""

import logging
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

import httpx

from train_estimator.cache import CachedPriceLookup, get_fare_cache
from train_estimator.config import settings
from train_estimator.database import DatabaseManager, get_db_manager
from train_estimator.exceptions import PriceLookupError

logger = logging.getLogger(__name__)

# Sentinel price meaning "no usable fare"
PRICE_LOOKUP_FAILED = -1

USER_AGENT = "train-ticket-estimator/1.0.0"


@runtime_checkable
class PriceLookupInterface(Protocol):
    """
    Interface for base fare lookups (Dependency Inversion Principle).
    The estimator depends on this contract only, never on a concrete backend.
    """

    async def get_price(self, from_city: str, to_city: str, when: datetime) -> Optional[float]:
        """Return the base fare, None or PRICE_LOOKUP_FAILED when there is none."""
        ...


class ApiPriceLookup:
    """
    Fetches base fares from the remote pricing API.

    The API answers ``GET <base_url>?from=..&to=..&date=..`` with a JSON body
    holding a ``price`` field. A missing, non-numeric or non-positive price
    maps to the sentinel.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Args:
            base_url: Pricing endpoint, defaults to settings.PRICE_API_URL
            timeout: Request timeout in seconds, defaults to settings.PRICE_API_TIMEOUT
            client: Shared client to reuse. A short-lived client is opened per
                    call when omitted.
        """
        self.base_url = base_url or settings.PRICE_API_URL
        self.timeout = timeout if timeout is not None else settings.PRICE_API_TIMEOUT
        self._client = client

    async def get_price(self, from_city: str, to_city: str, when: datetime) -> float:
        params = {"from": from_city, "to": to_city, "date": when.isoformat()}
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}

        try:
            if self._client is not None:
                response = await self._client.get(
                    self.base_url, params=params, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(
                        self.base_url, params=params, headers=headers, timeout=self.timeout
                    )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Base fare request %s -> %s failed: %s", from_city, to_city, e)
            raise PriceLookupError(f"Error fetching base fare: {e}") from e

        price = payload.get("price") if isinstance(payload, dict) else None
        # Only a positive number is a fare; anything else maps to the sentinel
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price <= 0:
            return PRICE_LOOKUP_FAILED
        return price


class DatabasePriceLookup:
    """Reads base fares from the local datastore."""

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self.db_manager = db_manager or get_db_manager()

    async def get_price(self, from_city: str, to_city: str, when: datetime) -> Optional[float]:
        # Stored fares do not vary with the departure date
        return self.db_manager.get_fare(from_city, to_city)


# Singleton instance for default lookup
_default_lookup: Optional[PriceLookupInterface] = None


def get_price_lookup() -> PriceLookupInterface:
    """
    Get the default price lookup (Singleton pattern).

    The backend is chosen by settings.PRICE_LOOKUP_BACKEND and wrapped in the
    base fare cache when settings.FARE_CACHE_ENABLED is set.
    """
    global _default_lookup
    if _default_lookup is None:
        backend = settings.PRICE_LOOKUP_BACKEND.strip().lower()
        if backend == "api":
            lookup = ApiPriceLookup()
        elif backend == "database":
            lookup = DatabasePriceLookup()
        else:
            raise ValueError(f"Unknown price lookup backend: {settings.PRICE_LOOKUP_BACKEND}")

        if settings.FARE_CACHE_ENABLED:
            lookup = CachedPriceLookup(lookup, get_fare_cache())
        _default_lookup = lookup
    return _default_lookup
