from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class AttendanceError(ValidationError):
    """A check-in/check-out attempt that was refused before or during submission.

    ``user_message`` is what gets shown to the staff member.
    """

    default_message = "Action failed. Please try again."

    def __init__(self, user_message: Optional[str] = None):
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class VerificationMissing(AttendanceError):
    default_message = "Please take a photo to verify your identity."


class LocationUnavailable(AttendanceError):
    default_message = "Location required. Please enable GPS or select Remote."


class GeofenceViolation(AttendanceError):
    def __init__(self, distance_meters: float, limit_meters: float):
        self.distance_meters = float(distance_meters)
        self.limit_meters = float(limit_meters)
        super().__init__(
            f"Geofence Error: You are {self.distance_meters:.0f}m away "
            f"(Limit: {self.limit_meters:g}m)."
        )


class CameraUnavailable(AttendanceError):
    default_message = "Unable to access camera. Please check permissions."


class UploadFailed(AttendanceError):
    default_message = "Photo upload failed. Please try again."


class TransitionRejected(AttendanceError):
    default_message = "Action failed. Please try again."


class TransitionNotAllowed(AttendanceError):
    default_message = "You have already checked out today."


class TransitionInProgress(AttendanceError):
    default_message = "A check-in is already being processed."
