from datetime import datetime, timedelta
from typing import Optional
import pytz
from flask import current_app
from eventease.exceptions import (
    BadRequestError,
    EventNotAuthorizedError,
    EventNotFoundError,
    RegistrationNotFoundError,
)
from eventease.models.enums import AttendanceStatus, RegistrationStatus
from eventease.repositories import (
    AttendanceRepository,
    EventRepository,
    RegistrationRepository,
)
from eventease.services.checkin_service import validate_notes
from eventease.utils.dates import as_utc, isoformat

FORBIDDEN_BODY_KEYS = ("userId", "user_id", "markedBy", "marked_by")


def _page(limit, offset, default_limit):
    try:
        limit = int(limit) if limit is not None else default_limit
        offset = int(offset) if offset is not None else 0
    except (TypeError, ValueError):
        raise BadRequestError("limit and offset must be integers", code="INVALID_PAGINATION")
    return max(1, min(limit, 100)), max(0, offset)


class AttendanceService:
    @staticmethod
    def mark_attendance(registration_id: int, data: dict, organizer, now: Optional[datetime] = None):
        """Manually set an attendee's presence.

        This is the only way a PRESENT record goes back to ABSENT, which
        re-opens the QR scan path for that registration.
        """
        now = now or datetime.now(pytz.UTC)

        if any(key in data for key in FORBIDDEN_BODY_KEYS):
            raise BadRequestError(
                "User ID cannot be provided in request body", code="USER_ID_NOT_ALLOWED"
            )
        is_present = data.get("isPresent")
        if not isinstance(is_present, bool):
            raise BadRequestError("isPresent must be a boolean value", code="INVALID_IS_PRESENT")
        notes = validate_notes(data.get("notes"))

        registration = RegistrationRepository.get_registration(registration_id)
        if not registration:
            raise RegistrationNotFoundError()
        if registration.event.organizer_id != organizer.id:
            raise EventNotAuthorizedError("Only event organizer can modify attendance records")

        attendance = AttendanceRepository.find_by_registration(registration_id)
        if attendance is None:
            attendance = AttendanceRepository.create(
                registration_id, is_present, now, organizer.id, notes
            )
            if attendance is None:
                attendance = AttendanceRepository.find_by_registration(registration_id)
                attendance = AttendanceRepository.set_presence(
                    attendance, is_present, now, organizer.id, notes
                )
        else:
            attendance = AttendanceRepository.set_presence(
                attendance, is_present, now, organizer.id, notes
            )

        current_app.logger.info(
            f"Organizer {organizer.id} manually marked registration {registration_id} "
            f"as {'present' if is_present else 'absent'}"
        )
        return attendance

    @staticmethod
    def get_event_roster(event_id: int, organizer, args) -> dict:
        event = EventRepository.get_event(event_id)
        if not event:
            raise EventNotFoundError()
        if event.organizer_id != organizer.id:
            raise EventNotAuthorizedError(
                "You are not authorized to view attendees for this event"
            )

        limit, offset = _page(args.get("limit"), args.get("offset"), 20)

        status_filter = args.get("status")
        registration_status = None
        if status_filter in [s.value for s in RegistrationStatus]:
            registration_status = RegistrationStatus(status_filter)

        attendance_filter = args.get("attendance")
        if attendance_filter not in [s.value for s in AttendanceStatus]:
            attendance_filter = None

        rows, total_count = AttendanceRepository.roster_for_event(
            event_id,
            registration_status=registration_status,
            attendance_filter=attendance_filter,
            search=args.get("search"),
            limit=limit,
            offset=offset,
        )
        counts = AttendanceRepository.count_by_status_for_event(event_id)

        attendees = []
        for registration, attendee, attendance, marker in rows:
            if attendance is None:
                status = AttendanceStatus.NOT_MARKED
            else:
                status = attendance.status
            attendees.append(
                {
                    "registrationId": registration.id,
                    "registrationDate": isoformat(registration.registration_date),
                    "registrationStatus": registration.status.value,
                    "user": attendee.to_summary(),
                    "attendance": {
                        "id": attendance.id if attendance else None,
                        "isPresent": attendance.is_present if attendance else None,
                        "markedAt": isoformat(attendance.marked_at) if attendance else None,
                        "markedBy": attendance.marked_by if attendance else None,
                        "markedByName": marker.name if marker else None,
                        "notes": attendance.notes if attendance else None,
                        "status": status.value,
                    },
                }
            )

        return {
            "event": {
                "id": event.id,
                "title": event.title,
                "eventDate": isoformat(event.event_date),
                "location": event.location,
                "totalRegistrations": counts["total"],
            },
            "attendees": attendees,
            "totalCount": total_count,
            "presentCount": counts["present"],
            "absentCount": counts["absent"],
            "notMarkedCount": counts["not_marked"],
        }

    @staticmethod
    def get_attendance_history(user, args) -> list:
        limit, offset = _page(args.get("limit"), args.get("offset"), 10)

        present_filter = args.get("present")
        is_present = None
        if present_filter is not None:
            if present_filter not in ("true", "false"):
                raise BadRequestError(
                    "Present filter must be 'true' or 'false'", code="INVALID_PRESENT_FILTER"
                )
            is_present = present_filter == "true"

        date_from = AttendanceService._parse_day(args.get("date_from"), "INVALID_DATE_FROM")
        date_to = AttendanceService._parse_day(args.get("date_to"), "INVALID_DATE_TO")

        sort = args.get("sort", "eventDate")
        if sort not in ("eventDate", "markedAt"):
            sort = "eventDate"
        order = "asc" if args.get("order") == "asc" else "desc"

        rows = AttendanceRepository.history_for_user(
            user.id,
            is_present=is_present,
            date_from=date_from,
            # date_to is inclusive of the whole day
            date_before=date_to + timedelta(days=1) if date_to else None,
            sort=sort,
            order=order,
            limit=limit,
            offset=offset,
        )
        return [
            {
                "id": attendance.id,
                "isPresent": attendance.is_present,
                "markedAt": isoformat(attendance.marked_at),
                "notes": attendance.notes,
                "registration": {
                    "id": registration.id,
                    "registrationDate": isoformat(registration.registration_date),
                    "status": registration.status.value,
                },
                "event": {
                    "id": event.id,
                    "title": event.title,
                    "description": event.description,
                    "eventDate": isoformat(event.event_date),
                    "location": event.location,
                },
            }
            for attendance, registration, event in rows
        ]

    @staticmethod
    def _parse_day(value: Optional[str], code: str) -> Optional[datetime]:
        if not value:
            return None
        try:
            return as_utc(datetime.strptime(value, "%Y-%m-%d"))
        except ValueError:
            raise BadRequestError(f"Invalid date format '{value}'. Use YYYY-MM-DD", code=code)
