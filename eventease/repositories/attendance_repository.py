from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import and_, asc, desc, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased
from flask import current_app
from eventease.extensions import db
from eventease.models import Attendance, Event, Registration, User


class AttendanceRepository:
    @staticmethod
    def find_by_registration(registration_id: int) -> Optional[Attendance]:
        return Attendance.query.filter_by(registration_id=registration_id).first()

    @staticmethod
    def create(registration_id: int, is_present: bool, marked_at: datetime,
               marked_by: int, notes: Optional[str]) -> Optional[Attendance]:
        """Insert the attendance row for a registration.

        Returns None when another request inserted the row first.
        """
        attendance = Attendance(
            registration_id=registration_id,
            is_present=is_present,
            marked_at=marked_at,
            marked_by=marked_by,
            notes=notes,
        )
        db.session.add(attendance)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            current_app.logger.info(
                f"Repository: attendance for registration {registration_id} was created concurrently"
            )
            return None
        return attendance

    @staticmethod
    def mark_present_if_absent(registration_id: int, marked_at: datetime,
                               marked_by: int, notes: Optional[str]) -> Optional[Attendance]:
        """Flip an absent record to present.

        The WHERE clause on ``is_present`` makes this a compare-and-set: when
        a concurrent scan already flipped the row, nothing is updated and None
        is returned.
        """
        updated = (
            Attendance.query.filter_by(registration_id=registration_id, is_present=False)
            .update(
                {
                    Attendance.is_present: True,
                    Attendance.marked_at: marked_at,
                    Attendance.marked_by: marked_by,
                    Attendance.notes: notes,
                },
                synchronize_session=False,
            )
        )
        db.session.commit()
        if not updated:
            return None
        return AttendanceRepository.find_by_registration(registration_id)

    @staticmethod
    def set_presence(attendance: Attendance, is_present: bool, marked_at: datetime,
                     marked_by: int, notes: Optional[str]) -> Attendance:
        attendance.is_present = is_present
        attendance.marked_at = marked_at
        attendance.marked_by = marked_by
        attendance.notes = notes
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return attendance

    @staticmethod
    def roster_for_event(event_id: int, registration_status=None, attendance_filter=None,
                         search: Optional[str] = None, limit: int = 20,
                         offset: int = 0) -> Tuple[List[tuple], int]:
        """Registrations of an event joined with their attendee and attendance row.

        Returns the requested page of ``(Registration, User, Attendance | None,
        marker User | None)`` tuples and the filtered total.
        """
        marker = aliased(User)
        conditions = [Registration.event_id == event_id]
        if registration_status is not None:
            conditions.append(Registration.status == registration_status)
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        if attendance_filter == "present":
            conditions.append(Attendance.is_present.is_(True))
        elif attendance_filter == "absent":
            conditions.append(Attendance.is_present.is_(False))
        elif attendance_filter == "not_marked":
            conditions.append(Attendance.id.is_(None))

        query = (
            db.session.query(Registration, User, Attendance, marker)
            .join(User, Registration.user_id == User.id)
            .outerjoin(Attendance, Attendance.registration_id == Registration.id)
            .outerjoin(marker, Attendance.marked_by == marker.id)
            .filter(and_(*conditions))
        )
        total = query.count()
        rows = (
            query.order_by(Registration.registration_date.desc(), Registration.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )
        return rows, total

    @staticmethod
    def count_by_status_for_event(event_id: int) -> dict:
        """Present, absent and not-marked counts across all of an event's registrations."""
        rows = (
            db.session.query(Attendance.is_present, func.count(Registration.id))
            .select_from(Registration)
            .outerjoin(Attendance, Attendance.registration_id == Registration.id)
            .filter(Registration.event_id == event_id)
            .group_by(Attendance.is_present)
            .all()
        )
        counts = {"present": 0, "absent": 0, "not_marked": 0, "total": 0}
        for is_present, count in rows:
            if is_present is None:
                counts["not_marked"] += count
            elif is_present:
                counts["present"] += count
            else:
                counts["absent"] += count
            counts["total"] += count
        return counts

    @staticmethod
    def history_for_user(user_id: int, is_present: Optional[bool] = None,
                         date_from: Optional[datetime] = None,
                         date_before: Optional[datetime] = None, sort: str = "eventDate",
                         order: str = "desc", limit: int = 10,
                         offset: int = 0) -> List[tuple]:
        """Marked attendance rows of a user as ``(Attendance, Registration, Event)`` tuples."""
        query = (
            db.session.query(Attendance, Registration, Event)
            .join(Registration, Attendance.registration_id == Registration.id)
            .join(Event, Registration.event_id == Event.id)
            .filter(Registration.user_id == user_id, Attendance.marked_at.isnot(None))
        )
        if is_present is not None:
            query = query.filter(Attendance.is_present.is_(is_present))
        if date_from is not None:
            query = query.filter(Event.event_date >= date_from)
        if date_before is not None:
            query = query.filter(Event.event_date < date_before)

        sort_column = Attendance.marked_at if sort == "markedAt" else Event.event_date
        direction = asc if order == "asc" else desc
        return query.order_by(direction(sort_column)).limit(limit).offset(offset).all()
