from enum import Enum


class EventStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"


class RegistrationStatus(Enum):
    REGISTERED = "registered"
    CANCELLED = "cancelled"


class UserRole(Enum):
    USER = 1
    ORGANIZER = 2


class AttendanceStatus(Enum):
    PRESENT = "present"
    ABSENT = "absent"
    NOT_MARKED = "not_marked"
