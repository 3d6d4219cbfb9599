"""Domain errors raised by the service layer.

Each error knows the HTTP status and machine-readable code it maps to; the
app factory turns them into the standard error envelope.
"""
from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for expected, user-recoverable failures."""

    status_code = 400
    code = 'SERVICE_ERROR'
    default_message = 'Request could not be completed'

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details: Dict[str, Any] = details
        super().__init__(self.message)


class ValidationError(ServiceError):
    code = 'VALIDATION_ERROR'
    default_message = 'Invalid request data'


class GeolocationUnavailable(ServiceError):
    code = 'LOCATION_UNAVAILABLE'
    default_message = 'Location unavailable. Please enable location services and try again.'


class SessionNotFound(ServiceError):
    status_code = 404
    code = 'SESSION_NOT_FOUND'
    default_message = 'Invalid session code'


class SessionAlreadyActive(ServiceError):
    status_code = 409
    code = 'SESSION_ALREADY_ACTIVE'
    default_message = 'You already have an active attendance session today'


class LocationRejected(ServiceError):
    status_code = 403
    code = 'LOCATION_REJECTED'

    def __init__(self, distance: float, radius: float):
        self.distance = distance
        self.radius = radius
        super().__init__(
            f'You must be within {radius:g} meters of the classroom to mark attendance. '
            f'You are currently {distance:.0f} meters away.',
            distance=round(distance),
            radius=radius
        )


class AlreadyMarked(ServiceError):
    status_code = 409
    code = 'ALREADY_MARKED'
    default_message = 'Attendance already marked today'


class StudentNotFound(ServiceError):
    status_code = 404
    code = 'STUDENT_NOT_FOUND'
    default_message = 'Student not found'


class SubjectNotAssigned(ServiceError):
    status_code = 403
    code = 'SUBJECT_NOT_ASSIGNED'
    default_message = 'You are only authorized to grade your assigned subject'
