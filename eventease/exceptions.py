class EventEaseError(Exception):
    """Base for errors that map to an HTTP status and a stable error code."""

    status_code = 400
    code = "BAD_REQUEST"
    message = "Bad request"

    def __init__(self, message=None, code=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        if code:
            self.code = code

    def to_dict(self):
        return {"error": self.message, "code": self.code}


class BadRequestError(EventEaseError):
    pass


class UnauthorizedError(EventEaseError):
    status_code = 401
    code = "AUTHENTICATION_REQUIRED"
    message = "Authentication required"


class ForbiddenError(EventEaseError):
    status_code = 403
    code = "FORBIDDEN"
    message = "Forbidden"


class NotFoundError(EventEaseError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Not found"


class MissingFieldsError(BadRequestError):
    code = "MISSING_FIELDS"

    def __init__(self, fields):
        super().__init__("Missing required fields")
        self.fields = fields

    def to_dict(self):
        body = super().to_dict()
        body["missing_fields"] = self.fields
        return body


# Authorization


class InsufficientPermissionsError(ForbiddenError):
    code = "INSUFFICIENT_PERMISSIONS"
    message = "Organizer role required"


class EventNotAuthorizedError(ForbiddenError):
    code = "EVENT_NOT_AUTHORIZED"
    message = "Not authorized for this event"


class RegistrationAccessDeniedError(ForbiddenError):
    code = "REGISTRATION_ACCESS_DENIED"
    message = "Access denied: Registration does not belong to you"


# Dangling references


class EventNotFoundError(NotFoundError):
    code = "EVENT_NOT_FOUND"
    message = "Event not found"


class RegistrationNotFoundError(NotFoundError):
    code = "REGISTRATION_NOT_FOUND"
    message = "Registration not found"


# Check-in failures


class InvalidQRTokenError(BadRequestError):
    code = "INVALID_QR_TOKEN"
    message = "Invalid QR code data"


class QRTokenExpiredError(BadRequestError):
    code = "QR_TOKEN_EXPIRED"
    message = "QR code has expired"


class FutureEventError(BadRequestError):
    code = "FUTURE_EVENT"
    message = "Cannot mark attendance for future events"


class InvalidRegistrationStatusError(BadRequestError):
    code = "INVALID_REGISTRATION_STATUS"
    message = "Registration is not in registered status"


class AlreadyPresentError(BadRequestError):
    code = "ALREADY_PRESENT"
    message = "Attendance already marked as present"


class QREncodingFailedError(EventEaseError):
    status_code = 500
    code = "QR_ENCODING_FAILED"
    message = "Failed to generate QR code"
