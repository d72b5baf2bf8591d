from datetime import datetime, timedelta
import pytest
import pytz
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash
from eventease import create_app
from eventease.extensions import db as _db
from eventease.models import Event, Registration, User
from eventease.models.enums import EventStatus, RegistrationStatus, UserRole

CHECKIN_SECRET = "checkin-test-secret-0123456789abcdef0123456789"


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "JWT_SECRET_KEY": "jwt-test-secret-0123456789abcdef0123456789",
            "CHECKIN_TOKEN_SECRET": CHECKIN_SECRET,
            "RATELIMIT_ENABLED": False,
        }
    )
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def checkin_service(app):
    return app.extensions["checkin_service"]


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(name=None, role=UserRole.USER, email=None):
        counter["n"] += 1
        name = name or f"User {counter['n']}"
        user = User(
            name=name,
            email=email or f"user{counter['n']}@example.com",
            password=generate_password_hash("password"),
            role_id=role.value,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def organizer(make_user):
    return make_user(name="Olivia Organizer", role=UserRole.ORGANIZER)


@pytest.fixture
def attendee(make_user):
    return make_user(name="Avery Attendee")


@pytest.fixture
def make_event(db):
    def _make_event(organizer, days_from_now=-1, title="Community Meetup",
                    status=EventStatus.PUBLISHED, max_attendees=None):
        event = Event(
            title=title,
            description="A test event",
            event_date=datetime.now(pytz.UTC) + timedelta(days=days_from_now),
            location="Town Hall",
            max_attendees=max_attendees,
            status=status.value,
            organizer_id=organizer.id,
        )
        db.session.add(event)
        db.session.commit()
        return event

    return _make_event


@pytest.fixture
def make_registration(db):
    def _make_registration(event, user, status=RegistrationStatus.REGISTERED):
        registration = Registration(
            event_id=event.id,
            user_id=user.id,
            status=status,
            registration_date=datetime.now(pytz.UTC) - timedelta(days=3),
        )
        db.session.add(registration)
        db.session.commit()
        return registration

    return _make_registration


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id))
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
