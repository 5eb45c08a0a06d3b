"""SQLAlchemy models package."""

from app.models.college import College
from app.models.admin import Admin
from app.models.student import Student
from app.models.event import Event
from app.models.registration import Registration
from app.models.feedback import Feedback

__all__ = ["College", "Admin", "Student", "Event", "Registration", "Feedback"]
