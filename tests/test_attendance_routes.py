from datetime import datetime, timedelta
import pytest
import pytz
from eventease.models import Attendance
from eventease.models.enums import RegistrationStatus, UserRole
from eventease.services.checkin_token import CheckInClaims


@pytest.fixture
def event(organizer, make_event):
    return make_event(organizer, days_from_now=-1, title="Rooftop Social")


@pytest.fixture
def registration(event, attendee, make_registration):
    return make_registration(event, attendee)


@pytest.fixture
def mark(db):
    def _mark(registration, is_present, marked_by, marked_at=None, notes=None):
        attendance = Attendance(
            registration_id=registration.id,
            is_present=is_present,
            marked_at=marked_at or datetime.now(pytz.UTC),
            marked_by=marked_by.id,
            notes=notes,
        )
        db.session.add(attendance)
        db.session.commit()
        return attendance

    return _mark


def put_attendance(client, headers, registration_id, body):
    return client.put(
        f"/api/attendance/registrations/{registration_id}", json=body, headers=headers
    )


class TestManualOverride:
    def test_marks_absent_attendee(self, client, auth_headers, organizer, registration):
        response = put_attendance(
            client, auth_headers(organizer), registration.id,
            {"isPresent": False, "notes": "Called in sick"},
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["is_present"] is False
        assert body["marked_by"] == organizer.id
        assert body["notes"] == "Called in sick"

    def test_absent_override_reopens_scanning(self, client, app, auth_headers, organizer,
                                              registration, mark):
        mark(registration, True, organizer)

        response = put_attendance(
            client, auth_headers(organizer), registration.id, {"isPresent": False}
        )
        assert response.status_code == 200

        signer = app.extensions["checkin_service"].signer
        qr_data = signer.issue(
            CheckInClaims.issued_now(registration.id, registration.event_id, registration.user_id)
        )
        scan = client.post(
            "/api/attendance/scan", json={"qrData": qr_data}, headers=auth_headers(organizer)
        )
        assert scan.status_code == 201
        assert Attendance.query.filter_by(registration_id=registration.id).count() == 1
        assert Attendance.query.filter_by(registration_id=registration.id).one().is_present

    def test_rejects_identity_in_body(self, client, auth_headers, organizer, registration):
        response = put_attendance(
            client, auth_headers(organizer), registration.id,
            {"isPresent": True, "markedBy": 99},
        )
        assert response.status_code == 400
        assert response.get_json()["code"] == "USER_ID_NOT_ALLOWED"

    def test_requires_boolean_is_present(self, client, auth_headers, organizer, registration):
        response = put_attendance(
            client, auth_headers(organizer), registration.id, {"isPresent": "yes"}
        )
        assert response.status_code == 400
        assert response.get_json()["code"] == "INVALID_IS_PRESENT"

    def test_rejects_non_string_notes(self, client, auth_headers, organizer, registration):
        response = put_attendance(
            client, auth_headers(organizer), registration.id,
            {"isPresent": True, "notes": {"text": "late"}},
        )
        assert response.status_code == 400
        assert response.get_json()["code"] == "INVALID_NOTES"
        assert Attendance.query.filter_by(registration_id=registration.id).count() == 0

    def test_rejects_non_object_body(self, client, auth_headers, organizer, registration):
        response = put_attendance(client, auth_headers(organizer), registration.id, [True])
        assert response.status_code == 400
        assert response.get_json()["code"] == "INVALID_BODY"

    def test_only_event_organizer(self, client, auth_headers, make_user, registration):
        stranger = make_user(role=UserRole.ORGANIZER)
        response = put_attendance(
            client, auth_headers(stranger), registration.id, {"isPresent": True}
        )
        assert response.status_code == 403
        assert response.get_json()["code"] == "EVENT_NOT_AUTHORIZED"

    def test_unknown_registration(self, client, auth_headers, organizer):
        response = put_attendance(client, auth_headers(organizer), 999, {"isPresent": True})
        assert response.status_code == 404
        assert response.get_json()["code"] == "REGISTRATION_NOT_FOUND"


class TestEventRoster:
    @pytest.fixture
    def roster(self, event, organizer, make_user, make_registration, mark):
        alice = make_user(name="Alice Present")
        bob = make_user(name="Bob Absent")
        carol = make_user(name="Carol Unmarked")
        dan = make_user(name="Dan Cancelled")
        mark(make_registration(event, alice), True, organizer)
        mark(make_registration(event, bob), False, organizer)
        make_registration(event, carol)
        make_registration(event, dan, status=RegistrationStatus.CANCELLED)
        return event

    def test_counts_every_registration(self, client, auth_headers, organizer, roster):
        response = client.get(f"/api/events/{roster.id}/attendees", headers=auth_headers(organizer))

        assert response.status_code == 200
        body = response.get_json()
        assert body["event"]["title"] == "Rooftop Social"
        assert body["event"]["totalRegistrations"] == 4
        assert body["totalCount"] == 4
        assert body["presentCount"] == 1
        assert body["absentCount"] == 1
        assert body["notMarkedCount"] == 2

        by_name = {a["user"]["name"]: a for a in body["attendees"]}
        assert by_name["Alice Present"]["attendance"]["status"] == "present"
        assert by_name["Alice Present"]["attendance"]["markedByName"] == organizer.name
        assert by_name["Bob Absent"]["attendance"]["status"] == "absent"
        assert by_name["Carol Unmarked"]["attendance"]["status"] == "not_marked"
        assert by_name["Carol Unmarked"]["attendance"]["id"] is None

    @pytest.mark.parametrize(
        "query, expected",
        [
            ("attendance=present", {"Alice Present"}),
            ("attendance=absent", {"Bob Absent"}),
            ("attendance=not_marked", {"Carol Unmarked", "Dan Cancelled"}),
            ("status=cancelled", {"Dan Cancelled"}),
            ("search=bob", {"Bob Absent"}),
        ],
    )
    def test_filters(self, client, auth_headers, organizer, roster, query, expected):
        response = client.get(
            f"/api/events/{roster.id}/attendees?{query}", headers=auth_headers(organizer)
        )

        body = response.get_json()
        assert {a["user"]["name"] for a in body["attendees"]} == expected
        assert body["totalCount"] == len(expected)
        # Summary counts ignore filters
        assert body["event"]["totalRegistrations"] == 4

    def test_pagination(self, client, auth_headers, organizer, roster):
        response = client.get(
            f"/api/events/{roster.id}/attendees?limit=2&offset=1", headers=auth_headers(organizer)
        )
        body = response.get_json()
        assert len(body["attendees"]) == 2
        assert body["totalCount"] == 4

    def test_invalid_pagination(self, client, auth_headers, organizer, roster):
        response = client.get(
            f"/api/events/{roster.id}/attendees?limit=many", headers=auth_headers(organizer)
        )
        assert response.status_code == 400
        assert response.get_json()["code"] == "INVALID_PAGINATION"

    def test_other_organizer_is_refused(self, client, auth_headers, make_user, roster):
        stranger = make_user(role=UserRole.ORGANIZER)
        response = client.get(f"/api/events/{roster.id}/attendees", headers=auth_headers(stranger))
        assert response.status_code == 403

    def test_unknown_event(self, client, auth_headers, organizer):
        response = client.get("/api/events/999/attendees", headers=auth_headers(organizer))
        assert response.status_code == 404
        assert response.get_json()["code"] == "EVENT_NOT_FOUND"


class TestAttendanceHistory:
    @pytest.fixture
    def history(self, organizer, attendee, make_event, make_registration, mark):
        march = make_event(organizer, title="March Meetup")
        march.event_date = datetime(2025, 3, 10, 18, 0, tzinfo=pytz.UTC)
        april = make_event(organizer, title="April Meetup")
        april.event_date = datetime(2025, 4, 14, 18, 0, tzinfo=pytz.UTC)
        may = make_event(organizer, title="May Meetup")
        may.event_date = datetime(2025, 5, 12, 18, 0, tzinfo=pytz.UTC)

        mark(make_registration(march, attendee), True, organizer,
             marked_at=datetime(2025, 3, 10, 18, 5, tzinfo=pytz.UTC))
        mark(make_registration(april, attendee), False, organizer,
             marked_at=datetime(2025, 4, 15, 9, 0, tzinfo=pytz.UTC), notes="No show")
        mark(make_registration(may, attendee), True, organizer,
             marked_at=datetime(2025, 5, 12, 18, 1, tzinfo=pytz.UTC))
        return attendee

    def titles(self, response):
        assert response.status_code == 200
        return [row["event"]["title"] for row in response.get_json()]

    def test_defaults_to_newest_event_first(self, client, auth_headers, history):
        response = client.get("/api/user/attendance", headers=auth_headers(history))
        assert self.titles(response) == ["May Meetup", "April Meetup", "March Meetup"]

        april = response.get_json()[1]
        assert april["isPresent"] is False
        assert april["notes"] == "No show"
        assert april["registration"]["status"] == "registered"

    def test_present_filter(self, client, auth_headers, history):
        response = client.get("/api/user/attendance?present=false", headers=auth_headers(history))
        assert self.titles(response) == ["April Meetup"]

    def test_date_range_includes_last_day(self, client, auth_headers, history):
        response = client.get(
            "/api/user/attendance?date_from=2025-04-01&date_to=2025-05-12&order=asc",
            headers=auth_headers(history),
        )
        assert self.titles(response) == ["April Meetup", "May Meetup"]

    def test_sort_by_marked_at(self, client, auth_headers, history):
        response = client.get(
            "/api/user/attendance?sort=markedAt&order=asc&limit=2", headers=auth_headers(history)
        )
        assert self.titles(response) == ["March Meetup", "April Meetup"]

    def test_other_users_records_are_hidden(self, client, auth_headers, make_user, history):
        response = client.get("/api/user/attendance", headers=auth_headers(make_user()))
        assert self.titles(response) == []

    @pytest.mark.parametrize(
        "query, code",
        [
            ("present=maybe", "INVALID_PRESENT_FILTER"),
            ("date_from=10-03-2025", "INVALID_DATE_FROM"),
            ("date_to=tomorrow", "INVALID_DATE_TO"),
            ("offset=x", "INVALID_PAGINATION"),
        ],
    )
    def test_invalid_parameters(self, client, auth_headers, history, query, code):
        response = client.get(f"/api/user/attendance?{query}", headers=auth_headers(history))
        assert response.status_code == 400
        assert response.get_json()["code"] == code

    def test_requires_authentication(self, client):
        assert client.get("/api/user/attendance").status_code == 401
