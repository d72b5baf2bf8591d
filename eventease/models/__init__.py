from eventease.models.user import User
from eventease.models.event import Event
from eventease.models.registration import Registration
from eventease.models.attendance import Attendance
from eventease.models.enums import EventStatus, RegistrationStatus, UserRole, AttendanceStatus
