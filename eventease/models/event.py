from eventease.extensions import db
from .enums import EventStatus, RegistrationStatus


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    event_date = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    location = db.Column(db.String(255), nullable=True)
    max_attendees = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=EventStatus.PUBLISHED.value)
    organizer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    organizer = db.relationship("User", backref=db.backref("organized_events", lazy="dynamic"))

    def to_dict(self):
        from .registration import Registration

        registered_count = (
            Registration.query.filter(Registration.event_id == self.id)
            .filter(Registration.status == RegistrationStatus.REGISTERED)
            .count()
        )
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "event_date": self.event_date.isoformat() if self.event_date else None,
            "location": self.location,
            "max_attendees": self.max_attendees,
            "status": self.status,
            "organizer_id": self.organizer_id,
            "registered_count": registered_count,
        }

    def __repr__(self):
        return f"<Event id={self.id} title={self.title!r} event_date={self.event_date}>"
