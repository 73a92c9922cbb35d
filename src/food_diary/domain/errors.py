"""Error taxonomy for diary operations."""


class FoodDiaryError(Exception):
    """Base error for the food diary."""


class ValidationError(FoodDiaryError):
    """Raised when user input cannot be processed."""


class ServiceError(FoodDiaryError):
    """Raised when the remote analysis service fails or returns bad output."""
