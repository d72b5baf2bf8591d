from eventease.extensions import db
from eventease.models import Registration
from eventease.models.enums import EventStatus, RegistrationStatus


def register(client, headers, event_id):
    return client.post(f"/api/events/{event_id}/register", headers=headers)


def cancel(client, headers, event_id):
    return client.post(f"/api/events/{event_id}/cancel-registration", headers=headers)


def test_register_for_upcoming_event(client, auth_headers, organizer, attendee, make_event):
    event = make_event(organizer, days_from_now=7)

    response = register(client, auth_headers(attendee), event.id)

    assert response.status_code == 201
    body = response.get_json()
    assert body["event_id"] == event.id
    assert body["user_id"] == attendee.id
    assert body["status"] == "registered"


def test_register_for_past_event(client, auth_headers, organizer, attendee, make_event):
    event = make_event(organizer, days_from_now=-2)
    response = register(client, auth_headers(attendee), event.id)
    assert response.status_code == 400
    assert response.get_json()["code"] == "EVENT_PAST"


def test_register_for_draft_event(client, auth_headers, organizer, attendee, make_event):
    event = make_event(organizer, days_from_now=7, status=EventStatus.DRAFT)
    response = register(client, auth_headers(attendee), event.id)
    assert response.status_code == 404
    assert response.get_json()["code"] == "EVENT_NOT_FOUND"


def test_register_twice(client, auth_headers, organizer, attendee, make_event):
    event = make_event(organizer, days_from_now=7)
    assert register(client, auth_headers(attendee), event.id).status_code == 201

    response = register(client, auth_headers(attendee), event.id)
    assert response.status_code == 400
    assert response.get_json()["code"] == "ALREADY_REGISTERED"


def test_register_for_full_event(client, auth_headers, organizer, attendee, make_user,
                                 make_event, make_registration):
    event = make_event(organizer, days_from_now=7, max_attendees=1)
    make_registration(event, make_user())

    response = register(client, auth_headers(attendee), event.id)
    assert response.status_code == 400
    assert response.get_json()["code"] == "EVENT_FULL"


def test_cancelled_seat_frees_capacity(client, auth_headers, organizer, attendee, make_user,
                                       make_event, make_registration):
    event = make_event(organizer, days_from_now=7, max_attendees=1)
    make_registration(event, make_user(), status=RegistrationStatus.CANCELLED)

    assert register(client, auth_headers(attendee), event.id).status_code == 201


def test_cancel_keeps_the_record(client, auth_headers, organizer, attendee, make_event,
                                 make_registration):
    event = make_event(organizer, days_from_now=7)
    registration = make_registration(event, attendee)

    response = cancel(client, auth_headers(attendee), event.id)

    assert response.status_code == 200
    assert response.get_json()["registration"]["status"] == "cancelled"
    assert db.session.get(Registration, registration.id).status == RegistrationStatus.CANCELLED


def test_cancel_after_event_started(client, auth_headers, organizer, attendee, make_event,
                                    make_registration):
    event = make_event(organizer, days_from_now=-1)
    make_registration(event, attendee)

    response = cancel(client, auth_headers(attendee), event.id)
    assert response.status_code == 400
    assert response.get_json()["code"] == "EVENT_STARTED"


def test_cancel_without_registration(client, auth_headers, organizer, attendee, make_event):
    event = make_event(organizer, days_from_now=7)
    response = cancel(client, auth_headers(attendee), event.id)
    assert response.status_code == 404
    assert response.get_json()["code"] == "NO_REGISTRATION_FOUND"


def test_list_my_registrations(client, auth_headers, organizer, attendee, make_user,
                               make_event, make_registration):
    mine = make_registration(make_event(organizer, title="Book Club"), attendee)
    make_registration(make_event(organizer, title="Chess Night"), make_user())

    response = client.get("/api/registrations", headers=auth_headers(attendee))

    assert response.status_code == 200
    body = response.get_json()
    assert [r["id"] for r in body] == [mine.id]
    assert body[0]["event"]["title"] == "Book Club"


def test_registration_routes_require_authentication(client, organizer, make_event):
    event = make_event(organizer, days_from_now=7)
    assert client.post(f"/api/events/{event.id}/register").status_code == 401
    assert client.get("/api/registrations").status_code == 401
