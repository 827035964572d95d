"""
Request/response schemas shared by the API and its clients.

Every successful JSON response is an envelope: ``{"data": ..., "total": n}``
for collections and ``{"data": ..., "message": "..."}`` for single records.
The client validates responses against the same models, so a server change
that breaks the envelope fails loudly on the client side.
"""

import re
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']
ROOM_DAYS = DAYS[:6]

ROOM_TYPES = ['Lecture Hall', 'Computer Lab', 'Laboratory', 'Seminar Room', 'Conference Room', 'Auditorium']
ROOM_FEATURES = [
    'Projector', 'Sound System', 'AC', 'WiFi', 'Computers', 'Lab Equipment',
    'Safety Equipment', 'Whiteboard', 'Smart Board', 'Microphone', 'Camera',
    'High-Speed Internet', 'Video Conferencing', 'Recording Equipment',
]
ROOM_STATUSES = ['Active', 'Maintenance', 'Inactive']

TEACHER_STATUSES = ['Active', 'Inactive']
PRIORITIES = ['low', 'medium', 'high']

COURSE_TYPES = ['Theory', 'Practical', 'Tutorial', 'Seminar']
COURSE_STATUSES = ['Active', 'Inactive']
SEMESTERS = list(range(1, 9))

TIMETABLE_STATUSES = ['draft', 'generating', 'completed', 'published', 'archived']

TIME_RE = re.compile(r'^([01]?[0-9]|2[0-3]):([0-5][0-9])$')

T = TypeVar('T')


def parse_time(value: str) -> int:
    """'09:30' -> minutes since midnight"""
    m = TIME_RE.match(str(value).strip())
    if not m:
        raise ValueError(f"invalid time '{value}', expected HH:MM")
    return int(m.group(1)) * 60 + int(m.group(2))


def parse_range(value: str) -> Tuple[int, int]:
    """'09:00-12:00' -> (540, 720)"""
    parts = str(value).split('-')
    if len(parts) != 2:
        raise ValueError(f"invalid time range '{value}', expected HH:MM-HH:MM")
    start, end = parse_time(parts[0]), parse_time(parts[1])
    if start >= end:
        raise ValueError(f"time range '{value}' ends before it starts")
    return start, end


def check_ranges(ranges: List[str]) -> None:
    """Raise ValueError when any two ranges of one day overlap."""
    spans = sorted((parse_range(r), r) for r in ranges)
    for (prev, prev_label), (cur, cur_label) in zip(spans, spans[1:]):
        if cur[0] < prev[1]:
            raise ValueError(f"time ranges '{prev_label}' and '{cur_label}' overlap")


def _choice(value, options, label):
    if value not in options:
        raise ValueError(f"{label} must be one of: {', '.join(map(str, options))}")
    return value


def _unique(values):
    seen = []
    for v in values:
        if v not in seen:
            seen.append(v)
    return seen


# ---------------- envelopes ----------------

class ListResponse(BaseModel, Generic[T]):
    model_config = ConfigDict(extra='forbid')
    data: List[T]
    total: int


class ItemResponse(BaseModel, Generic[T]):
    model_config = ConfigDict(extra='forbid')
    data: T
    message: Optional[str] = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(extra='forbid')
    message: str


class ImportResult(BaseModel):
    imported: int
    errors: List[str] = []


# ---------------- classrooms ----------------

class RoomIn(BaseModel):
    name: str = Field(min_length=1)
    building: str = Field(min_length=1)
    floor: str = ''
    type: str
    capacity: int = Field(gt=0)
    features: List[str] = []
    availability: Dict[str, List[str]] = {}
    status: str = 'Active'

    @field_validator('type')
    @classmethod
    def check_type(cls, v):
        return _choice(v, ROOM_TYPES, 'type')

    @field_validator('status')
    @classmethod
    def check_status(cls, v):
        return _choice(v, ROOM_STATUSES, 'status')

    @field_validator('features')
    @classmethod
    def check_features(cls, v):
        for feature in v:
            _choice(feature, ROOM_FEATURES, 'feature')
        return _unique(v)

    @field_validator('availability')
    @classmethod
    def check_availability(cls, v):
        for day, ranges in v.items():
            _choice(day, ROOM_DAYS, 'availability day')
            check_ranges(ranges)
        return v


class RoomOut(RoomIn):
    model_config = ConfigDict(from_attributes=True)
    id: str


# ---------------- teachers ----------------

class DayAvailability(BaseModel):
    available: bool = False
    start_time: str = '09:00'
    end_time: str = '17:00'

    @model_validator(mode='after')
    def check_times(self):
        start, end = parse_time(self.start_time), parse_time(self.end_time)
        if self.available and start >= end:
            raise ValueError(f"end time {self.end_time} must be after start time {self.start_time}")
        return self


class TeacherIn(BaseModel):
    name: str = Field(min_length=1)
    email: str = ''
    phone: str = ''
    department: str = ''
    designation: str = ''
    qualification: str = ''
    experience: str = ''
    subjects: List[str] = []
    max_hours_per_week: int = Field(gt=0)
    availability: Dict[str, DayAvailability] = {}
    priority: str = 'medium'
    status: str = 'Active'

    @field_validator('email')
    @classmethod
    def check_email(cls, v):
        if v and '@' not in v:
            raise ValueError(f"invalid email address '{v}'")
        return v

    @field_validator('subjects')
    @classmethod
    def check_subjects(cls, v):
        return _unique([s.strip() for s in v if s.strip()])

    @field_validator('availability')
    @classmethod
    def check_days(cls, v):
        for day in v:
            _choice(day, DAYS, 'availability day')
        return v

    @field_validator('priority')
    @classmethod
    def check_priority(cls, v):
        return _choice(v, PRIORITIES, 'priority')

    @field_validator('status')
    @classmethod
    def check_status(cls, v):
        return _choice(v, TEACHER_STATUSES, 'status')


class TeacherOut(TeacherIn):
    model_config = ConfigDict(from_attributes=True)
    id: str


# ---------------- courses ----------------

class CourseIn(BaseModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    program: str = ''
    semester: int = Field(ge=1, le=len(SEMESTERS))
    credits: int = Field(default=0, ge=0)
    type: str = 'Theory'
    hours_per_week: int = Field(gt=0)
    has_lab: bool = False
    lab_hours: Optional[int] = Field(default=None, ge=0)
    prerequisites: List[str] = []
    status: str = 'Active'

    @field_validator('code')
    @classmethod
    def strip_code(cls, v):
        return v.strip()

    @field_validator('type')
    @classmethod
    def check_type(cls, v):
        return _choice(v, COURSE_TYPES, 'type')

    @field_validator('status')
    @classmethod
    def check_status(cls, v):
        return _choice(v, COURSE_STATUSES, 'status')

    @field_validator('prerequisites')
    @classmethod
    def check_prerequisites(cls, v):
        return _unique([p.strip() for p in v if p.strip()])

    @model_validator(mode='after')
    def check_lab(self):
        if self.has_lab and not self.lab_hours:
            raise ValueError('lab_hours must be greater than 0 when has_lab is set')
        if self.code in self.prerequisites:
            raise ValueError('a course cannot be its own prerequisite')
        return self


class CourseOut(CourseIn):
    model_config = ConfigDict(from_attributes=True)
    id: str


# ---------------- timetables ----------------

class EntryIn(BaseModel):
    day: str
    start_time: str
    end_time: str
    course_code: str = ''
    course_name: str = ''
    session_type: str = 'Lecture'
    teacher: str = ''
    classroom: str = ''
    program: str = ''
    student_count: int = Field(default=0, ge=0)

    @field_validator('day')
    @classmethod
    def check_day(cls, v):
        return _choice(v, DAYS, 'day')

    @model_validator(mode='after')
    def check_times(self):
        parse_range(f"{self.start_time}-{self.end_time}")
        return self


class EntryOut(EntryIn):
    model_config = ConfigDict(from_attributes=True)


class CommentIn(BaseModel):
    text: str = Field(min_length=1, max_length=500)


class CommentOut(CommentIn):
    model_config = ConfigDict(from_attributes=True)
    created_at: datetime


class StatusUpdate(BaseModel):
    status: str


class TimetableIn(BaseModel):
    name: str = Field(min_length=1)
    academic_year: str = ''
    semester: int = Field(default=1, ge=1, le=2)
    department: str = ''
    year: int = Field(default=1, ge=1, le=6)
    status: str = 'draft'
    entries: List[EntryIn] = []

    @field_validator('status')
    @classmethod
    def check_status(cls, v):
        return _choice(v, TIMETABLE_STATUSES, 'status')


class TimetableSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    academic_year: str
    semester: int
    department: str
    year: int
    status: str
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TimetableOut(TimetableSummary):
    entries: List[EntryOut] = []
    comments: List[CommentOut] = []


def as_dict(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode='json')
