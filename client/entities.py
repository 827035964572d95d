"""
client/entities.py

Per-resource descriptors used by the store, the form buffer and the pages:
which pydantic model validates a draft, what an empty draft looks like,
which fields are numeric or set-valued.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel

from backend import schemas

# room time slots offered by the classroom form (lunch hour left out)
ROOM_TIME_SLOTS = [
    '09:00-10:00', '10:00-11:00', '11:00-12:00', '12:00-13:00',
    '14:00-15:00', '15:00-16:00', '16:00-17:00',
]

WEEKDAYS = schemas.DAYS[:5]


def coerce_int(value: Any) -> Optional[int]:
    """Form input -> int. Blank gives None, '0' gives 0, anything else non-numeric raises ValueError."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"expected a whole number, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected a whole number, got {value!r}")
        return int(value)
    text = str(value).strip()
    if text == '':
        return None
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"expected a whole number, got '{text}'") from None


def room_template() -> Dict[str, Any]:
    return {
        'name': '',
        'building': '',
        'floor': '',
        'type': 'Lecture Hall',
        'capacity': None,
        'features': [],
        'availability': {day: [] for day in schemas.ROOM_DAYS},
        'status': 'Active',
    }


def teacher_template() -> Dict[str, Any]:
    availability = {}
    for day in schemas.DAYS:
        if day in WEEKDAYS:
            availability[day] = {'available': True, 'start_time': '09:00', 'end_time': '17:00'}
        else:
            availability[day] = {'available': False, 'start_time': '09:00', 'end_time': '13:00'}
    return {
        'name': '',
        'email': '',
        'phone': '',
        'department': '',
        'designation': '',
        'qualification': '',
        'experience': '',
        'subjects': [],
        'max_hours_per_week': 20,
        'availability': availability,
        'priority': 'medium',
        'status': 'Active',
    }


def course_template() -> Dict[str, Any]:
    return {
        'name': '',
        'code': '',
        'program': '',
        'semester': 1,
        'credits': 3,
        'type': 'Theory',
        'hours_per_week': 3,
        'has_lab': False,
        'lab_hours': None,
        'prerequisites': [],
        'status': 'Active',
    }


@dataclass(frozen=True)
class EntityKind:
    resource: str
    label: str
    id_prefix: str
    draft_model: Type[BaseModel]
    record_model: Type[BaseModel]
    template_factory: Any
    numeric_fields: Tuple[str, ...] = ()
    set_fields: Tuple[str, ...] = ()
    # 'slots': day -> list of ranges, 'hours': day -> {available, start_time, end_time}
    availability_style: str = ''
    search_fields: Tuple[str, ...] = field(default=('name',))

    def template(self) -> Dict[str, Any]:
        return copy.deepcopy(self.template_factory())

    @property
    def fields(self) -> List[str]:
        return list(self.template_factory().keys())


ROOMS = EntityKind(
    resource='classrooms',
    label='Classroom',
    id_prefix='R',
    draft_model=schemas.RoomIn,
    record_model=schemas.RoomOut,
    template_factory=room_template,
    numeric_fields=('capacity',),
    set_fields=('features',),
    availability_style='slots',
    search_fields=('name', 'building', 'type'),
)

TEACHERS = EntityKind(
    resource='teachers',
    label='Teacher',
    id_prefix='T',
    draft_model=schemas.TeacherIn,
    record_model=schemas.TeacherOut,
    template_factory=teacher_template,
    numeric_fields=('max_hours_per_week',),
    set_fields=('subjects',),
    availability_style='hours',
    search_fields=('name', 'email', 'department'),
)

COURSES = EntityKind(
    resource='courses',
    label='Course',
    id_prefix='C',
    draft_model=schemas.CourseIn,
    record_model=schemas.CourseOut,
    template_factory=course_template,
    numeric_fields=('semester', 'credits', 'hours_per_week', 'lab_hours'),
    set_fields=('prerequisites',),
    search_fields=('name', 'code', 'program'),
)

KINDS = {kind.resource: kind for kind in (ROOMS, TEACHERS, COURSES)}


def get_kind(resource: str) -> EntityKind:
    try:
        return KINDS[resource]
    except KeyError:
        raise ValueError(f"unknown resource {resource!r}") from None
