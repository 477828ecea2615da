"""Models for the train ticket estimation system."""

from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class DiscountCard(str, Enum):
    """Discount cards a passenger can hold."""
    SENIOR = "Senior"
    TRAIN_STROKE = "TrainStroke"
    COUPLE = "Couple"
    HALF_COUPLE = "HalfCouple"
    FAMILY = "Family"


class TripDetails(BaseModel):
    """Origin, destination and departure time of a trip."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_city: str = Field(..., alias="from", description="Start city")
    to_city: str = Field(..., alias="to", description="Destination city")
    when: datetime = Field(..., description="Departure date and time")


class Passenger(BaseModel):
    """Model representing a single passenger."""
    model_config = ConfigDict(frozen=True)

    age: float = Field(..., description="Age in years, may be fractional")
    discounts: FrozenSet[DiscountCard] = Field(
        default_factory=frozenset,
        description="Discount cards held by the passenger"
    )
    last_name: Optional[str] = Field(None, description="Used for family grouping")

    def has_card(self, card: DiscountCard) -> bool:
        return card in self.discounts

    @property
    def is_minor(self) -> bool:
        return self.age < 18


class TripRequest(BaseModel):
    """Request model for a price estimate."""
    model_config = ConfigDict(frozen=True)

    details: TripDetails
    passengers: Tuple[Passenger, ...] = Field(
        default=(),
        description="Passengers travelling together"
    )


class PassengerFare(BaseModel):
    """A passenger's fare before group discounts."""
    passenger_index: int = Field(..., description="Position in the request")
    age: float
    fare: float = Field(..., description="Fare after age, timing and fixed-price rules")


class PriceQuote(BaseModel):
    """Response model for a price estimate."""
    base_fare: float = Field(..., description="Fare returned by the lookup")
    passengers: List[PassengerFare] = Field(
        default_factory=list,
        description="Per-passenger fares"
    )
    subtotal: float = Field(..., description="Sum of passenger fares")
    group_adjustment: float = Field(
        0.0,
        description="Amount added by family, couple or half-couple discounts"
    )
    total: float = Field(..., description="Total trip price")


class BaseFare(BaseModel):
    """Model representing a stored base fare between two cities."""
    from_city: str = Field(..., min_length=1)
    to_city: str = Field(..., min_length=1)
    fare: float = Field(..., gt=0)
