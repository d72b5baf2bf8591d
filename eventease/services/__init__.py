from eventease.services.user_service import UserService
from eventease.services.event_service import EventService
from eventease.services.registration_service import RegistrationService
from eventease.services.attendance_service import AttendanceService
