"""Pydantic schemas for request/response validation."""

from typing import Dict, List, Literal, Optional
from uuid import UUID
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

EventType = Literal["academic", "cultural", "sports", "technical", "social", "other"]
EventStatus = Literal["upcoming", "ongoing", "completed", "cancelled"]
AttendanceStatus = Literal["attended", "absent"]
StudentRanking = Literal["attended", "participation", "feedback"]


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC."""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CamelModel(BaseModel):
    """Response model whose JSON keys are camelCase (totalRegistrations, ...)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ─── Auth ────────────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: str
    password: str


class AdminCreate(BaseModel):
    email: str
    password: str = Field(min_length=6)
    role: Literal["super_admin", "college_admin"] = "college_admin"
    college_id: Optional[UUID] = None


class AdminResponse(BaseModel):
    id: UUID
    email: str
    role: str
    college_id: Optional[UUID] = None
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: AdminResponse


class StudentCreate(BaseModel):
    name: str = Field(min_length=2)
    email: str
    password: str = Field(min_length=6)
    student_id: str = Field(min_length=1)


class StudentResponse(BaseModel):
    id: UUID
    college_id: UUID
    name: str
    email: str
    student_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class StudentTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    student: StudentResponse


class StudentProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[str] = None


class StudentProfileResponse(BaseModel):
    message: str
    student: StudentResponse


class PasswordChange(CamelModel):
    """Accepts currentPassword/newPassword (student app) or snake_case."""

    current_password: str = Field(min_length=6)
    new_password: str = Field(min_length=6)


# ─── College ─────────────────────────────────────────────────────────────────

class CollegeCreate(BaseModel):
    name: str = Field(min_length=2)
    address: str = Field(min_length=2)


class CollegeResponse(BaseModel):
    id: UUID
    name: str
    address: str
    created_at: datetime

    class Config:
        from_attributes = True


class CollegeDetail(BaseModel):
    college: CollegeResponse
    admin: Optional[AdminResponse] = None


# ─── Event ───────────────────────────────────────────────────────────────────

class EventCreate(BaseModel):
    name: str = Field(min_length=3)
    type: EventType
    host: str = Field(min_length=2)
    description: str = Field(min_length=10)
    start_time: datetime
    end_time: datetime
    location: str = Field(min_length=2)
    poster_url: Optional[str] = None
    max_participants: Optional[int] = Field(default=None, ge=1)

    @field_validator("start_time", "end_time")
    @classmethod
    def naive_times(cls, value):
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class EventUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    type: Optional[EventType] = None
    host: Optional[str] = Field(default=None, min_length=2)
    description: Optional[str] = Field(default=None, min_length=10)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = Field(default=None, min_length=2)
    poster_url: Optional[str] = None
    max_participants: Optional[int] = Field(default=None, ge=1)
    status: Optional[EventStatus] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def naive_times(cls, value):
        return to_naive_utc(value)


class EventResponse(BaseModel):
    id: UUID
    college_id: UUID
    name: str
    type: str
    host: str
    description: str
    start_time: datetime
    end_time: datetime
    location: str
    poster_url: Optional[str] = None
    max_participants: Optional[int] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class EventBrief(BaseModel):
    id: UUID
    name: str
    type: str
    start_time: datetime
    end_time: datetime
    location: str

    class Config:
        from_attributes = True


# ─── Registration ────────────────────────────────────────────────────────────

class RegisterEventRequest(BaseModel):
    event_id: UUID


class RegistrationResponse(BaseModel):
    id: UUID
    student_id: UUID
    event_id: UUID
    status: str
    registered_at: datetime

    class Config:
        from_attributes = True


class MyEventResponse(BaseModel):
    id: UUID
    status: str
    registered_at: datetime
    event: EventResponse
    has_feedback: bool = Field(default=False, alias="hasFeedback")

    class Config:
        from_attributes = True
        populate_by_name = True


# ─── Feedback ────────────────────────────────────────────────────────────────

class FeedbackCreate(BaseModel):
    event_id: UUID
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=500)


class FeedbackUpdate(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=500)


class FeedbackResponse(BaseModel):
    id: UUID
    student_id: UUID
    event_id: UUID
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class EventFeedbackSummary(CamelModel):
    event: EventBrief
    average_rating: float
    total_feedbacks: int
    rating_distribution: Dict[int, int]
    feedbacks: List[FeedbackResponse]


class FeedbackPage(CamelModel):
    feedbacks: List[FeedbackResponse]
    total_pages: int
    current_page: int
    total: int


# ─── Attendance ──────────────────────────────────────────────────────────────

class MarkAttendanceRequest(BaseModel):
    student_id: UUID
    event_id: UUID
    status: AttendanceStatus


class MarkAttendanceResponse(BaseModel):
    message: str
    registration: RegistrationResponse


class BulkAttendanceItem(BaseModel):
    # Kept loose so one bad item becomes a per-item error instead of a 422
    student_id: str
    status: str


class BulkAttendanceRequest(BaseModel):
    event_id: UUID
    attendance: List[BulkAttendanceItem]


class BulkAttendanceResult(BaseModel):
    student_id: str
    success: bool
    status: Optional[str] = None
    error: Optional[str] = None


class BulkAttendanceResponse(BaseModel):
    message: str
    results: List[BulkAttendanceResult]


class StudentBrief(BaseModel):
    id: UUID
    name: str
    email: str
    student_id: str

    class Config:
        from_attributes = True


class RegisteredStudent(BaseModel):
    id: UUID
    status: str
    registered_at: datetime
    student: StudentBrief


class EventAttendanceSummary(CamelModel):
    total_registered: int
    attended: int
    absent: int
    pending: int
    attendance_percentage: float


class EventAttendanceReport(CamelModel):
    event: EventBrief
    summary: EventAttendanceSummary
    registrations: List[RegisteredStudent]


class AttendedEvent(BaseModel):
    id: UUID
    status: str
    registered_at: datetime
    event: EventBrief


class StudentAttendanceSummary(CamelModel):
    total_events: int
    attended_events: int
    attendance_rate: float


class StudentAttendanceHistory(CamelModel):
    student: StudentBrief
    summary: StudentAttendanceSummary
    history: List[AttendedEvent]


# ─── Reports ─────────────────────────────────────────────────────────────────

class EventStats(EventResponse):
    """Event fields at the top level, plus camelCase counters."""

    total_registrations: int = Field(alias="totalRegistrations")
    attended_count: int = Field(alias="attendedCount")
    attendance_rate: float = Field(alias="attendanceRate")
    average_rating: float = Field(alias="averageRating")
    feedback_count: int = Field(alias="feedbackCount")

    class Config:
        from_attributes = True
        populate_by_name = True


class PopularEventsReport(CamelModel):
    events: List[EventStats]
    total: int


class StudentStats(StudentBrief):
    """Student fields at the top level, plus camelCase counters."""

    total_events: int = Field(alias="totalEvents")
    attended_events: int = Field(alias="attendedEvents")
    participation_rate: float = Field(alias="participationRate")
    feedback_count: int = Field(alias="feedbackCount")

    class Config:
        from_attributes = True
        populate_by_name = True


class TopStudentStats(StudentStats):
    average_rating_given: float = Field(alias="averageRatingGiven")


class StudentParticipationReport(CamelModel):
    students: List[StudentStats]
    total: int


class TopStudentsReport(CamelModel):
    top_students: List[TopStudentStats]
    criteria: str
    total: int


class EventTypeStats(CamelModel):
    type: str
    total_events: int
    total_registrations: int
    total_attended: int
    average_attendance_rate: float
    total_feedbacks: int
    average_rating: float


class EventTypeAnalytics(CamelModel):
    analytics: List[EventTypeStats]


class MonthlyAttendance(CamelModel):
    month: str
    total_events: int
    total_registrations: int
    total_attended: int
    attendance_rate: float


class AttendanceTrends(CamelModel):
    trends: List[MonthlyAttendance]


class DashboardStats(CamelModel):
    total_students: int
    total_events: int
    total_registrations: int
    total_feedbacks: int
    active_students: int
    upcoming_events: int
    average_attendance_rate: float
    average_rating: float
