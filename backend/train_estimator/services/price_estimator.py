"""Price estimation service implementing the ticket pricing rules."""

import logging
import math
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional, Sequence, Union

from train_estimator.exceptions import InvalidTripInputError, PriceLookupError
from train_estimator.models import (
    DiscountCard,
    Passenger,
    PassengerFare,
    PriceQuote,
    TripDetails,
    TripRequest,
)
from train_estimator.services.price_lookup import PriceLookupInterface, get_price_lookup

logger = logging.getLogger(__name__)

CHILD_PRICE = 9.0
EMPLOYEE_PRICE = 1.0

EARLY_PURCHASE_PERIOD = timedelta(days=30)
LAST_MINUTE_PERIOD = timedelta(hours=6)
# Departures after this point (and before the early purchase period) get the graduated rise
RISE_PERIOD_START = EARLY_PURCHASE_PERIOD - timedelta(days=25)
RISE_PERIOD_REFERENCE_DAYS = 20
RISE_STEP = 0.02

PriceLookupFunc = Callable[[str, str, datetime], Awaitable[Optional[float]]]


class PriceEstimator:
    """
    Turns a trip request into a ticket price.

    The base fare comes from an injected price lookup, either an object
    implementing PriceLookupInterface or a bare coroutine function with the
    same signature as ``get_price``. The estimator holds no per-request state,
    so one instance can serve concurrent requests.
    """

    def __init__(self, price_lookup: Union[PriceLookupInterface, PriceLookupFunc]):
        self._get_price = getattr(price_lookup, "get_price", price_lookup)

    async def estimate(self, trip_request: TripRequest, now: Optional[datetime] = None) -> float:
        """
        Estimate the total price of a trip.

        Args:
            trip_request: Trip details and passengers
            now: Reference time for date validation and purchase timing.
                 Defaults to the current time.

        Returns:
            Total price, unrounded

        Raises:
            InvalidTripInputError: If the request fails validation
            PriceLookupError: If no usable base fare is available
        """
        quote = await self.quote(trip_request, now)
        return quote.total

    async def quote(self, trip_request: TripRequest, now: Optional[datetime] = None) -> PriceQuote:
        """Estimate a trip and return the per-passenger breakdown."""
        passengers = trip_request.passengers
        if not passengers:
            return PriceQuote(base_fare=0.0, subtotal=0.0, total=0.0)

        details = trip_request.details
        if now is None:
            now = datetime.now(details.when.tzinfo)

        self.validate(trip_request, now)
        base_fare = await self._fetch_base_fare(details)

        passenger_fares = []
        subtotal = 0.0
        for idx, passenger in enumerate(passengers):
            fare = self.passenger_fare(passenger, base_fare, details.when, now)
            passenger_fares.append(
                PassengerFare(passenger_index=idx, age=passenger.age, fare=fare)
            )
            subtotal += fare

        total = self.apply_group_discounts(subtotal, base_fare, passengers)

        logger.debug(
            "Estimated %s -> %s for %d passenger(s): base=%s subtotal=%s total=%s",
            details.from_city, details.to_city, len(passengers), base_fare, subtotal, total
        )
        return PriceQuote(
            base_fare=base_fare,
            passengers=passenger_fares,
            subtotal=subtotal,
            group_adjustment=total - subtotal,
            total=total
        )

    @staticmethod
    def validate(trip_request: TripRequest, now: datetime) -> None:
        """Check the request in a fixed order: ages, start city, destination, date."""
        details = trip_request.details

        if any(passenger.age < 0 for passenger in trip_request.passengers):
            raise InvalidTripInputError("Age is invalid")

        if not details.from_city.strip():
            raise InvalidTripInputError("Start city is invalid")

        if not details.to_city.strip():
            raise InvalidTripInputError("Destination city is invalid")

        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if details.when < start_of_day:
            raise InvalidTripInputError("Date is invalid")

    async def _fetch_base_fare(self, details: TripDetails) -> float:
        price = await self._get_price(details.from_city, details.to_city, details.when)
        # Only a positive number is a usable base fare
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price <= 0:
            raise PriceLookupError(
                f"No base fare available from {details.from_city} to {details.to_city}"
            )
        return float(price)

    def passenger_fare(
        self, passenger: Passenger, base_fare: float, when: datetime, now: datetime
    ) -> float:
        """
        Price a single passenger, before group discounts.

        Fixed prices (infants, employees, young children) win over the age
        tier and purchase timing rules.
        """
        if passenger.age < 1:
            return 0.0

        if passenger.has_card(DiscountCard.TRAIN_STROKE):
            return EMPLOYEE_PRICE

        if passenger.age < 4:
            return CHILD_PRICE

        fare = self._age_tier_fare(passenger, base_fare)
        return self._apply_purchase_timing(fare, base_fare, when, now)

    @staticmethod
    def _age_tier_fare(passenger: Passenger, base_fare: float) -> float:
        if passenger.age <= 17:
            return base_fare * 0.6

        if passenger.age >= 70:
            fare = base_fare * 0.8
            if passenger.has_card(DiscountCard.SENIOR):
                fare -= base_fare * 0.2
            return fare

        return base_fare * 1.2

    @staticmethod
    def _apply_purchase_timing(
        fare: float, base_fare: float, when: datetime, now: datetime
    ) -> float:
        if when >= now + EARLY_PURCHASE_PERIOD or when <= now + LAST_MINUTE_PERIOD:
            return fare - base_fare * 0.2

        if when > now + RISE_PERIOD_START:
            days_before_departure = math.ceil(abs(when - now) / timedelta(days=1))
            rise_modifier = RISE_PERIOD_REFERENCE_DAYS - days_before_departure
            return fare + rise_modifier * (RISE_STEP * base_fare)

        # TODO: confirm with pricing owners whether departures 6h-5d out should really pay double
        return fare + base_fare

    def apply_group_discounts(
        self, total: float, base_fare: float, passengers: Sequence[Passenger]
    ) -> float:
        """
        Apply family, couple or half-couple discounts to the summed fares.

        A family card anywhere in the trip disables the couple discounts.
        """
        if any(passenger.has_card(DiscountCard.FAMILY) for passenger in passengers):
            return self._apply_family_discount(total, base_fare, passengers)

        has_minor = any(passenger.is_minor for passenger in passengers)

        if len(passengers) == 2:
            is_couple = any(p.has_card(DiscountCard.COUPLE) for p in passengers)
            if is_couple and not has_minor:
                total -= base_fare * 0.2 * 2

        if len(passengers) == 1:
            is_half_couple = passengers[0].has_card(DiscountCard.HALF_COUPLE)
            if is_half_couple and not has_minor:
                total -= base_fare * 0.1

        return total

    @staticmethod
    def _apply_family_discount(
        total: float, base_fare: float, passengers: Sequence[Passenger]
    ) -> float:
        family_names = {
            passenger.last_name
            for passenger in passengers
            if passenger.last_name and passenger.has_card(DiscountCard.FAMILY)
        }

        for passenger in passengers:
            if passenger.age <= 1 or passenger.last_name not in family_names:
                continue
            if passenger.has_card(DiscountCard.TRAIN_STROKE):
                continue

            # Family pricing replaces the senior card discount already in the fare
            if passenger.age >= 70 and passenger.has_card(DiscountCard.SENIOR):
                total += base_fare * 0.2
            if 0 < passenger.age < 4:
                total -= CHILD_PRICE * 0.3
            if passenger.age >= 4:
                total -= base_fare * 0.3

        return total


# Singleton instance for default estimator
_default_estimator: Optional[PriceEstimator] = None


def get_price_estimator() -> PriceEstimator:
    """Get the default estimator, backed by the configured price lookup."""
    global _default_estimator
    if _default_estimator is None:
        _default_estimator = PriceEstimator(get_price_lookup())
    return _default_estimator
