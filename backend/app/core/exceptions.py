"""
Custom Exceptions - Application-specific error types
"""


class RoutineTrackerException(Exception):
    """Base exception for all routine tracker errors"""
    status_code = 500
    code = "internal_error"


class ValidationError(RoutineTrackerException):
    """Raised when caller-controlled input breaks a business rule"""
    status_code = 400
    code = "validation_error"


class NotFoundError(RoutineTrackerException):
    """Raised when a routine or completion is absent or owned by someone else"""
    status_code = 404
    code = "not_found"


class InternalInvariantError(RoutineTrackerException):
    """Raised when a repository call that should have succeeded reports failure"""
    status_code = 500
    code = "internal_error"


class DatabaseError(RoutineTrackerException):
    """Raised when database operations fail"""
    status_code = 500
    code = "storage_error"


class ConfigurationError(RoutineTrackerException):
    """Raised when startup configuration is invalid"""
    pass


class ExternalServiceError(RoutineTrackerException):
    """Raised when external services (Twilio) fail"""
    pass
