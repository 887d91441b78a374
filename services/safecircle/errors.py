"""Domain errors raised by the SafeCircle core and mapped to HTTP by the routes."""

from typing import List


class GuardianValidationError(ValueError):
    """Guardian input broke one or more rules; ``errors`` lists every rule code."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(f"invalid guardian: {', '.join(self.errors)}")


class InvalidCoordinatesError(ValueError):
    """Latitude or longitude is missing or not a finite number."""

    code = "invalid_lat_lng"


class EmergencyPreconditionError(Exception):
    """An emergency package cannot be built from the current state."""

    NO_GUARDIANS = "no_guardians"
    NO_LOCATION = "no_location"

    def __init__(self, code: str):
        self.code = code
        super().__init__(code)
