"""API endpoints for ticket price estimation."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from train_estimator.cache import get_fare_cache
from train_estimator.config import settings
from train_estimator.database import DatabaseManager, get_db_manager
from train_estimator.exceptions import InvalidTripInputError, PriceLookupError
from train_estimator.models import BaseFare, PriceQuote, TripRequest
from train_estimator.services import PriceEstimator, get_price_estimator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Price Estimation"])


def get_estimator() -> PriceEstimator:
    """Dependency injection for the price estimator."""
    return get_price_estimator()


def get_database() -> DatabaseManager:
    """Dependency injection for the base fare datastore."""
    return get_db_manager()


@router.post("/estimate", response_model=PriceQuote)
async def estimate_price(
    request: TripRequest,
    estimator: PriceEstimator = Depends(get_estimator)
) -> PriceQuote:
    """
    Estimate the price of a trip for a group of passengers.

    Raises:
        HTTPException: 400 for invalid input, 502 when no base fare is available
    """
    try:
        return await estimator.quote(request)
    except InvalidTripInputError as e:
        raise HTTPException(status_code=400, detail=e.reason)
    except PriceLookupError as e:
        logger.warning("Price lookup failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/base-fares")
async def get_base_fares(db_manager: DatabaseManager = Depends(get_database)):
    """Get all base fares from the local datastore."""
    fares = [
        {
            "from_city": from_city,
            "to_city": to_city,
            "fare": fare,
            "description": f"{from_city} to {to_city}"
        }
        for (from_city, to_city), fare in db_manager.get_all_fares().items()
    ]

    return {
        "fares": fares,
        "available_cities": db_manager.get_available_cities(),
        "total_fares": len(fares),
        "lookup_backend": settings.PRICE_LOOKUP_BACKEND
    }


@router.put("/base-fares")
async def update_base_fare(
    fare: BaseFare,
    db_manager: DatabaseManager = Depends(get_database)
):
    """Update or create a base fare in the local datastore."""
    stored = db_manager.update_fare(fare.from_city, fare.to_city, fare.fare)

    # Drop cached fares so the new value is used
    if settings.FARE_CACHE_ENABLED:
        get_fare_cache().invalidate(stored.from_city, stored.to_city)

    return {
        "from_city": stored.from_city,
        "to_city": stored.to_city,
        "fare": stored.fare,
        "message": "Base fare updated successfully in local datastore"
    }


@router.get("/health")
async def health_check(db_manager: DatabaseManager = Depends(get_database)):
    """Health check endpoint including datastore status."""
    db_status = "healthy"
    try:
        fares_count = len(db_manager.get_all_fares())
    except Exception as e:
        db_status = f"unhealthy: {e}"
        fares_count = 0

    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "datastore_status": db_status,
        "base_fares_count": fares_count
    }
