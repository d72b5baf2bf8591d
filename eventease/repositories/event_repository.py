from eventease.extensions import db
from eventease.models import Event
from eventease.models.enums import EventStatus


class EventRepository:
    @staticmethod
    def get_published_events():
        return (
            Event.query.filter_by(status=EventStatus.PUBLISHED.value)
            .order_by(Event.event_date.asc())
            .all()
        )

    @staticmethod
    def get_event(event_id: int) -> Event:
        return db.session.get(Event, event_id)

    @staticmethod
    def create_event(attrs):
        event = Event(**attrs)
        db.session.add(event)
        db.session.commit()
        return event
