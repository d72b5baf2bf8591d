from datetime import datetime
import pytz
from flask import current_app
from eventease.repositories import EventRepository, RegistrationRepository
from eventease.exceptions import BadRequestError, EventNotFoundError, NotFoundError
from eventease.models.enums import EventStatus, RegistrationStatus
from eventease.utils.dates import as_utc


class RegistrationService:
    @staticmethod
    def register_for_event(event_id: int, user):
        current_app.logger.info(f"Registration attempt: User {user.id} for event {event_id}")

        event = EventRepository.get_event(event_id)
        if not event or event.status != EventStatus.PUBLISHED.value:
            raise EventNotFoundError("Event not found or not published")

        if as_utc(event.event_date) <= datetime.now(pytz.UTC):
            raise BadRequestError("Cannot register for past events", code="EVENT_PAST")

        if RegistrationRepository.find_active(event_id, user.id):
            current_app.logger.warning(f"User {user.id} already registered for event {event_id}")
            raise BadRequestError("Already registered for this event", code="ALREADY_REGISTERED")

        if event.max_attendees:
            registered = RegistrationRepository.count_active_by_event(event_id)
            if registered >= event.max_attendees:
                current_app.logger.info(
                    f"Event {event_id} is full ({registered}/{event.max_attendees})"
                )
                raise BadRequestError("Event is at full capacity", code="EVENT_FULL")

        registration = RegistrationRepository.register_for_event(
            {
                "event_id": event_id,
                "user_id": user.id,
                "status": RegistrationStatus.REGISTERED,
                "registration_date": datetime.now(pytz.UTC),
            }
        )
        current_app.logger.info(f"Registered user {user.id} for event {event_id}")
        return registration

    @staticmethod
    def cancel_registration(event_id: int, user):
        event = EventRepository.get_event(event_id)
        if not event:
            raise EventNotFoundError()

        if as_utc(event.event_date) <= datetime.now(pytz.UTC):
            raise BadRequestError(
                "Cannot cancel registration for events that have already started",
                code="EVENT_STARTED",
            )

        registration = RegistrationRepository.find_active(event_id, user.id)
        if not registration:
            current_app.logger.warning(
                f"User {user.id} attempted to cancel non-existent registration for event {event_id}"
            )
            raise NotFoundError(
                "No active registration found for this event", code="NO_REGISTRATION_FOUND"
            )

        # Cancelled registrations are kept for the audit trail
        RegistrationRepository.update_status(registration, RegistrationStatus.CANCELLED)
        current_app.logger.info(f"User {user.id} cancelled registration {registration.id}")
        return registration

    @staticmethod
    def get_user_registrations(user):
        results = []
        for registration in RegistrationRepository.find_by_user(user.id):
            data = registration.to_dict()
            data["event"] = {
                "id": registration.event.id,
                "title": registration.event.title,
                "event_date": registration.event.event_date.isoformat(),
                "location": registration.event.location,
            }
            results.append(data)
        return results
