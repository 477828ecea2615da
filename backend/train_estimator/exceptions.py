"""Error kinds raised by the train ticket estimator."""


class TrainEstimatorError(Exception):
    """Base class for estimator errors."""


class InvalidTripInputError(TrainEstimatorError, ValueError):
    """The trip request cannot be priced. Raised before any fare lookup."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class PriceLookupError(TrainEstimatorError):
    """The base fare lookup returned no usable price."""

    def __init__(self, message: str = "Base fare lookup failed"):
        super().__init__(message)
