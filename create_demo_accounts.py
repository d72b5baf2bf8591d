"""
Script to create or update demo accounts and a same-day event for trying the
QR check-in flow locally.
"""

from datetime import datetime
import pytz
from werkzeug.security import generate_password_hash
from eventease import create_app
from eventease.extensions import db
from eventease.models import Event, Registration, User
from eventease.models.enums import EventStatus, RegistrationStatus, UserRole


def upsert_user(email, name, role):
    user = User.query.filter_by(email=email).first()
    if user:
        user.password = generate_password_hash("password")
        db.session.commit()
        print(f"Updated {role.name.lower()} password")
        return user

    user = User(
        email=email,
        password=generate_password_hash("password"),
        role_id=role.value,
        name=name,
    )
    db.session.add(user)
    db.session.commit()
    print(f"Created {role.name.lower()} user with ID: {user.id}")
    return user


def main():
    """Create or update demo accounts with correct credentials."""
    app = create_app()
    with app.app_context():
        db.create_all()

        organizer = upsert_user("organizer@example.com", "Demo Organizer", UserRole.ORGANIZER)
        attendee = upsert_user("attendee@example.com", "Demo Attendee", UserRole.USER)

        event = Event.query.filter_by(title="Demo Meetup", organizer_id=organizer.id).first()
        if not event:
            event = Event(
                title="Demo Meetup",
                description="Event for trying out QR check-in",
                event_date=datetime.now(pytz.UTC),
                location="Main Hall",
                max_attendees=50,
                status=EventStatus.PUBLISHED.value,
                organizer_id=organizer.id,
            )
            db.session.add(event)
            db.session.commit()
            print(f"Created demo event with ID: {event.id}")

        registration = Registration.query.filter_by(
            event_id=event.id, user_id=attendee.id, status=RegistrationStatus.REGISTERED
        ).first()
        if not registration:
            registration = Registration(
                event_id=event.id,
                user_id=attendee.id,
                status=RegistrationStatus.REGISTERED,
            )
            db.session.add(registration)
            db.session.commit()
            print(f"Registered attendee with registration ID: {registration.id}")

        print("Demo accounts setup complete!")


if __name__ == "__main__":
    main()
