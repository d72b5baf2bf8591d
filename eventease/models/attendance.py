from eventease.extensions import db
from .enums import AttendanceStatus


class Attendance(db.Model):
    """Check-in outcome for a single registration.

    At most one row exists per registration; the unique constraint on
    ``registration_id`` is what makes concurrent first scans collapse into a
    single record.
    """

    __tablename__ = "attendance"

    id = db.Column(db.Integer, primary_key=True)
    registration_id = db.Column(
        db.Integer, db.ForeignKey("registrations.id"), nullable=False, unique=True
    )
    is_present = db.Column(db.Boolean, nullable=False, default=False)
    marked_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    marked_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    registration = db.relationship(
        "Registration", backref=db.backref("attendance", uselist=False)
    )
    marker = db.relationship("User", foreign_keys=[marked_by])

    @property
    def status(self) -> AttendanceStatus:
        return AttendanceStatus.PRESENT if self.is_present else AttendanceStatus.ABSENT

    def to_dict(self):
        return {
            "id": self.id,
            "registration_id": self.registration_id,
            "is_present": self.is_present,
            "marked_at": self.marked_at.isoformat() if self.marked_at else None,
            "marked_by": self.marked_by,
            "notes": self.notes,
        }

    def __repr__(self):
        return (
            f"<Attendance registration_id={self.registration_id} "
            f"is_present={self.is_present} marked_by={self.marked_by}>"
        )
