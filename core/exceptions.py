from rest_framework import status
from rest_framework.exceptions import APIException


class MentorshipAPIError(APIException):
    """Base for errors that carry extra top-level keys in the response envelope."""

    def __init__(self, detail=None, code=None, extra=None):
        super().__init__(detail=detail, code=code)
        self.extra = extra or {}


class MissingFields(MentorshipAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Missing required fields."
    default_code = "missing_fields"

    def __init__(self, fields, detail=None):
        fields = list(fields)
        if detail is None:
            detail = f"Missing required fields: {', '.join(fields)}"
        super().__init__(detail=detail, extra={"missingFields": fields})


class InvalidTimeRange(MentorshipAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "End time must be after start time."
    default_code = "invalid_time_range"


class InvalidIdentifier(MentorshipAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid id."
    default_code = "invalid_id"


class MissingLinkage(MentorshipAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Either a mentorship or a session must be linked."
    default_code = "missing_linkage"


class InvalidPaymentSignature(MentorshipAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid payment signature."
    default_code = "invalid_signature"


class RoleNotProvisioned(MentorshipAPIError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "role_not_provisioned"

    def __init__(self, role):
        super().__init__(detail=f"Access denied: {role} role not provisioned")


class ActiveRoleMismatch(MentorshipAPIError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "active_role_mismatch"

    def __init__(self, expected, actual):
        super().__init__(detail=f"Active role mismatch. Expected {expected}, got {actual}")


class OwnershipMismatch(MentorshipAPIError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You can only access your own records."
    default_code = "forbidden"


class JoinNotAllowed(MentorshipAPIError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You cannot join this session right now."
    default_code = "join_not_allowed"

    def __init__(self, detail=None, minutes_until_join=None):
        extra = {"canJoin": False}
        if minutes_until_join is not None:
            extra["minutesUntilJoin"] = minutes_until_join
        super().__init__(detail=detail, extra=extra)


class PaymentNotConfigured(MentorshipAPIError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Payment verification is not configured."
    default_code = "payment_not_configured"


class AuthenticationUnavailable(MentorshipAPIError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Authentication is not configured on this server."
    default_code = "auth_unavailable"
