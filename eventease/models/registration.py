from eventease.extensions import db
from .enums import RegistrationStatus


class Registration(db.Model):
    __tablename__ = "registrations"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    status = db.Column(db.Enum(RegistrationStatus), nullable=False, default=RegistrationStatus.REGISTERED)
    registration_date = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )

    # Relationships
    event = db.relationship("Event", backref=db.backref("registrations", lazy="dynamic"))
    user = db.relationship("User", backref=db.backref("registrations", lazy="dynamic"))

    @property
    def is_active(self) -> bool:
        return self.status == RegistrationStatus.REGISTERED

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "user_id": self.user_id,
            "status": self.status.value,
            "registration_date": (
                self.registration_date.isoformat() if self.registration_date else None
            ),
        }

    def __repr__(self):
        return (
            f"Registration("
            f"id={self.id}, "
            f"event_id={self.event_id}, "
            f"user_id={self.user_id}, "
            f"status={self.status}, "
            f"registration_date={self.registration_date}"
            f")"
        )
