from typing import List, Optional
from eventease.extensions import db
from eventease.models import Registration
from eventease.models.enums import RegistrationStatus


class RegistrationRepository:
    @staticmethod
    def get_registration(registration_id: int) -> Optional[Registration]:
        return db.session.get(Registration, registration_id)

    @staticmethod
    def find_active(event_id: int, user_id: int) -> Optional[Registration]:
        """Find the user's registration for an event that has not been cancelled"""
        return Registration.query.filter_by(
            event_id=event_id, user_id=user_id, status=RegistrationStatus.REGISTERED
        ).first()

    @staticmethod
    def find_by_user(user_id: int) -> List[Registration]:
        return (
            Registration.query.filter_by(user_id=user_id)
            .order_by(Registration.registration_date.desc())
            .all()
        )

    @staticmethod
    def count_active_by_event(event_id: int) -> int:
        return Registration.query.filter_by(
            event_id=event_id, status=RegistrationStatus.REGISTERED
        ).count()

    @staticmethod
    def register_for_event(attrs):
        registration = Registration(**attrs)
        db.session.add(registration)
        db.session.commit()
        return registration

    @staticmethod
    def update_status(registration: Registration, new_status: RegistrationStatus):
        registration.status = new_status
        try:
            db.session.commit()
            return registration
        except Exception:
            db.session.rollback()
            raise
