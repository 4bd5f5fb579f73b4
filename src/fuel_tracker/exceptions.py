class FuelTrackerError(Exception):
    """Base exception for fuel tracker errors."""


class ValidationError(FuelTrackerError, ValueError):
    """Raised when trip input is malformed or out of range."""


class LocationLookupError(FuelTrackerError, LookupError):
    """Raised when geocoding or routing yields no usable result."""


class AddressNotFoundError(LocationLookupError):
    """Raised when an address cannot be resolved to a coordinate."""


class NoRouteFoundError(LocationLookupError):
    """Raised when a drivable route cannot be generated."""


class ExternalServiceError(FuelTrackerError):
    """Raised when an upstream API call fails."""


class SourceUnavailableError(FuelTrackerError):
    """Raised by a price source that cannot produce a value."""


class HistoryIndexError(FuelTrackerError, IndexError):
    """Raised when a history position does not exist."""


class FavoriteNotFoundError(FuelTrackerError, LookupError):
    """Raised when a saved favorite route does not exist."""
