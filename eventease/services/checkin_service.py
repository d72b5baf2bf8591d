"""QR check-in workflow: issuing tokens to attendees and redeeming scans."""

import logging
from datetime import datetime
from typing import Optional
import pytz
from eventease.exceptions import (
    AlreadyPresentError,
    BadRequestError,
    EventNotAuthorizedError,
    EventNotFoundError,
    FutureEventError,
    InsufficientPermissionsError,
    InvalidQRTokenError,
    InvalidRegistrationStatusError,
    QREncodingFailedError,
    QRTokenExpiredError,
    RegistrationAccessDeniedError,
    RegistrationNotFoundError,
    UnauthorizedError,
)
from eventease.models import User
from eventease.repositories import (
    AttendanceRepository,
    EventRepository,
    RegistrationRepository,
)
from eventease.services.checkin_token import (
    CheckInClaims,
    CheckInTokenSigner,
    InvalidSignatureError,
    TokenExpiredError,
)
from eventease.services.qr_code import EncodingError, QRCodeEncoder
from eventease.utils.dates import as_utc, isoformat

logger = logging.getLogger(__name__)


def validate_notes(notes) -> Optional[str]:
    """Empty notes are stored as NULL; anything but a string is rejected."""
    if notes is None:
        return None
    if not isinstance(notes, str):
        raise BadRequestError("notes must be a string", code="INVALID_NOTES")
    return notes or None


class CheckInService:
    def __init__(self, signer: CheckInTokenSigner, encoder: QRCodeEncoder):
        self.signer = signer
        self.encoder = encoder

    def issue_token(self, user: Optional[User], registration_id: int) -> dict:
        if user is None:
            raise UnauthorizedError()

        registration = RegistrationRepository.get_registration(registration_id)
        if not registration:
            raise RegistrationNotFoundError()
        if registration.user_id != user.id:
            logger.warning(
                f"User {user.id} requested a check-in code for registration {registration_id} they do not own"
            )
            raise RegistrationAccessDeniedError()

        claims = CheckInClaims.issued_now(
            registration_id=registration.id,
            event_id=registration.event_id,
            user_id=registration.user_id,
        )
        token = self.signer.issue(claims)
        try:
            qr_image = self.encoder.encode_base64(token)
        except EncodingError as e:
            logger.error(f"Could not encode check-in code for registration {registration.id}: {e}")
            raise QREncodingFailedError()

        logger.info(f"Issued check-in code for registration {registration.id}")
        return {
            "qrCode": qr_image,
            "registrationId": registration.id,
            "eventId": registration.event_id,
            "eventTitle": registration.event.title,
            "registrationDate": isoformat(registration.registration_date),
            "expiresAt": self.signer.expires_at(claims).isoformat(),
        }

    def redeem_token(self, user: Optional[User], qr_data: str,
                     notes: Optional[str] = None, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(pytz.UTC)

        if user is None:
            raise UnauthorizedError()
        if not user.is_organizer:
            raise InsufficientPermissionsError()
        if not qr_data:
            raise BadRequestError("QR data is required", code="MISSING_QR_DATA")
        notes = validate_notes(notes)

        try:
            claims = self.signer.verify(qr_data)
        except TokenExpiredError:
            logger.info(f"Organizer {user.id} scanned an expired check-in code")
            raise QRTokenExpiredError()
        except InvalidSignatureError as e:
            logger.warning(f"Organizer {user.id} scanned an invalid check-in code: {e}")
            raise InvalidQRTokenError()

        event = EventRepository.get_event(claims.event_id)
        if not event:
            raise EventNotFoundError()
        if event.organizer_id != user.id:
            logger.warning(
                f"Organizer {user.id} attempted check-in for event {event.id} owned by {event.organizer_id}"
            )
            raise EventNotAuthorizedError()

        if as_utc(event.event_date).date() > as_utc(now).date():
            raise FutureEventError()

        registration = RegistrationRepository.get_registration(claims.registration_id)
        if not registration:
            raise RegistrationNotFoundError()
        if not registration.is_active:
            raise InvalidRegistrationStatusError()

        attendance = self._record_presence(registration.id, user.id, now, notes)

        logger.info(
            f"Organizer {user.id} checked in registration {registration.id} for event {event.id}"
        )
        return {
            "success": True,
            "attendanceId": attendance.id,
            "registrationId": attendance.registration_id,
            "attendeeName": registration.user.name,
            "eventTitle": event.title,
            "markedAt": isoformat(attendance.marked_at),
            "markedBy": user.to_summary(),
        }

    @staticmethod
    def _record_presence(registration_id: int, organizer_id: int, now: datetime,
                         notes: Optional[str]):
        existing = AttendanceRepository.find_by_registration(registration_id)
        if existing is None:
            created = AttendanceRepository.create(
                registration_id, True, now, organizer_id, notes
            )
            if created is not None:
                return created
            # Lost the insert race; fall through to the conditional flip
            existing = AttendanceRepository.find_by_registration(registration_id)

        if existing.is_present:
            raise AlreadyPresentError()

        flipped = AttendanceRepository.mark_present_if_absent(
            registration_id, now, organizer_id, notes
        )
        if flipped is None:
            raise AlreadyPresentError()
        return flipped
