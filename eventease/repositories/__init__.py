from eventease.repositories.user_repository import UserRepository
from eventease.repositories.event_repository import EventRepository
from eventease.repositories.registration_repository import RegistrationRepository
from eventease.repositories.attendance_repository import AttendanceRepository
