from typing import List
from eventease.utils.dates import parse_iso_datetime
from flask import current_app
from eventease.repositories import EventRepository
from eventease.exceptions import (
    BadRequestError,
    EventNotFoundError,
    InsufficientPermissionsError,
    MissingFieldsError,
)
from eventease.models.enums import EventStatus
from eventease.models import Event


class EventService:
    @staticmethod
    def get_events() -> List[Event]:
        return EventRepository.get_published_events()

    @staticmethod
    def get_event(event_id: int) -> Event:
        event = EventRepository.get_event(event_id)
        if not event:
            raise EventNotFoundError()
        return event

    @staticmethod
    def create_event(data, user):
        if not user.is_organizer:
            raise InsufficientPermissionsError()

        if "userId" in data or "user_id" in data or "organizer_id" in data:
            raise BadRequestError(
                "User ID cannot be provided in request body", code="USER_ID_NOT_ALLOWED"
            )

        missing = [f for f in ("title", "event_date") if not data.get(f)]
        if missing:
            raise MissingFieldsError(missing)
        if not str(data["title"]).strip():
            raise BadRequestError("Title is required", code="MISSING_TITLE")

        try:
            event_date = parse_iso_datetime(data["event_date"])
        except (TypeError, ValueError):
            raise BadRequestError("Invalid event date format", code="INVALID_DATE_FORMAT")

        max_attendees = data.get("max_attendees")
        if max_attendees is not None and (
            isinstance(max_attendees, bool) or not isinstance(max_attendees, int) or max_attendees <= 0
        ):
            raise BadRequestError(
                "max_attendees must be a positive integer", code="INVALID_MAX_ATTENDEES"
            )

        status = data.get("status", EventStatus.PUBLISHED.value)
        if status not in [s.value for s in EventStatus]:
            raise BadRequestError("Invalid event status", code="INVALID_STATUS")

        event = EventRepository.create_event(
            {
                "title": data["title"].strip(),
                "description": data.get("description"),
                "event_date": event_date,
                "location": data.get("location"),
                "max_attendees": max_attendees,
                "status": status,
                "organizer_id": user.id,
            }
        )
        current_app.logger.info(f"Organizer {user.id} created event {event.id}")
        return event
