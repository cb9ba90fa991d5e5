class InvalidRangeError(ValueError):
    """Forecast start or end cannot be resolved against the table."""


class DimensionMismatchError(ValueError):
    """Model width disagrees with the feature schema."""


class NumericalInstabilityError(ArithmeticError):
    """A model produced NaN or infinite values during a forecast."""
