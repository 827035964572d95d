from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from . import models, schemas

# resource name -> (model, input schema, output schema)
RESOURCES = {
    'classrooms': (models.Room, schemas.RoomIn, schemas.RoomOut),
    'teachers': (models.Teacher, schemas.TeacherIn, schemas.TeacherOut),
    'courses': (models.Course, schemas.CourseIn, schemas.CourseOut),
}

ORDERING = {
    models.Room: models.Room.name,
    models.Teacher: models.Teacher.name,
    models.Course: models.Course.code,
}


# list route query parameters: name -> (attribute, match)
# 'eq' equal, 'int' equal after int(), 'min' at least, 'has' list contains
LIST_FILTERS = {
    models.Room: {
        'building': ('building', 'eq'),
        'type': ('type', 'eq'),
        'status': ('status', 'eq'),
        'min_capacity': ('capacity', 'min'),
        'feature': ('features', 'has'),
    },
    models.Teacher: {
        'department': ('department', 'eq'),
        'designation': ('designation', 'eq'),
        'priority': ('priority', 'eq'),
        'status': ('status', 'eq'),
        'subject': ('subjects', 'has'),
    },
    models.Course: {
        'program': ('program', 'eq'),
        'semester': ('semester', 'int'),
        'type': ('type', 'eq'),
        'status': ('status', 'eq'),
        'prerequisite': ('prerequisites', 'has'),
    },
}


def list_records(db: Session, model, filters: Optional[Dict[str, str]] = None):
    """All records of ``model``; ``filters`` are list route query parameters (ValueError on bad ones)."""
    q = db.query(model)
    contains = []
    for name, value in (filters or {}).items():
        try:
            attr, match = LIST_FILTERS[model][name]
        except KeyError:
            raise ValueError(f"unknown filter '{name}'") from None
        column = getattr(model, attr)
        if match == 'has':
            contains.append((attr, value))
            continue
        if match in ('int', 'min'):
            try:
                value = int(value)
            except ValueError:
                raise ValueError(f"filter '{name}' must be a whole number") from None
        q = q.filter(column >= value if match == 'min' else column == value)
    records = q.order_by(ORDERING[model]).all()
    # JSON list columns are matched in Python
    return [r for r in records if all(v in (getattr(r, attr) or []) for attr, v in contains)]


def get_record(db: Session, model, record_id: str):
    return db.query(model).filter(model.id == record_id).first()


def create_record(db: Session, model, payload: Dict):
    record = model(**payload)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def update_record(db: Session, model, record_id: str, payload: Dict):
    record = get_record(db, model, record_id)
    if record is None:
        return None
    for key, value in payload.items():
        setattr(record, key, value)
    db.commit()
    db.refresh(record)
    return record


def delete_record(db: Session, model, record_id: str) -> bool:
    record = get_record(db, model, record_id)
    if record is None:
        return False
    db.delete(record)
    db.commit()
    return True


def is_active(record) -> bool:
    return str(record.status or '').lower() == 'active'


# ---------------- timetables ----------------

def list_timetables(db: Session, status: Optional[str] = None, department: Optional[str] = None,
                    academic_year: Optional[str] = None, semester: Optional[int] = None):
    q = db.query(models.Timetable)
    if status:
        q = q.filter(models.Timetable.status == status)
    if department:
        q = q.filter(models.Timetable.department == department)
    if academic_year:
        q = q.filter(models.Timetable.academic_year == academic_year)
    if semester:
        q = q.filter(models.Timetable.semester == semester)
    return q.order_by(models.Timetable.created_at.desc(), models.Timetable.id).all()


def get_timetable(db: Session, timetable_id: str):
    return db.query(models.Timetable).filter(models.Timetable.id == timetable_id).first()


def create_timetable(db: Session, payload: schemas.TimetableIn):
    data = payload.model_dump(exclude={'entries'})
    t = models.Timetable(**data)
    if t.status == 'published':
        t.published_at = datetime.now(timezone.utc)
    t.entries = [models.TimetableEntry(**e.model_dump()) for e in payload.entries]
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


def set_timetable_status(db: Session, timetable_id: str, status: str):
    t = get_timetable(db, timetable_id)
    if t is None:
        return None
    t.status = status
    if status == 'published':
        t.published_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(t)
    return t


def add_timetable_comment(db: Session, timetable_id: str, text: str):
    t = get_timetable(db, timetable_id)
    if t is None:
        return None
    c = models.TimetableComment(timetable_id=t.id, text=text)
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


def delete_timetable(db: Session, timetable_id: str) -> bool:
    t = get_timetable(db, timetable_id)
    if t is None:
        return False
    db.delete(t)
    db.commit()
    return True


# ---------------- statistics ----------------

def _grouped(records, attr) -> List[Dict]:
    counts = Counter(getattr(r, attr) or 'Unknown' for r in records)
    return [{'key': k, 'count': v} for k, v in sorted(counts.items())]


def _activity(records) -> Dict:
    active = sum(1 for r in records if is_active(r))
    return {'active': active, 'inactive': len(records) - active, 'total': len(records)}


def data_statistics(db: Session) -> Dict:
    teachers = db.query(models.Teacher).all()
    rooms = db.query(models.Room).all()
    courses = db.query(models.Course).all()
    return {
        'teachers': {**_activity(teachers), 'by_department': _grouped(teachers, 'department')},
        'classrooms': {**_activity(rooms), 'by_type': _grouped(rooms, 'type'),
                       'total_capacity': sum(int(r.capacity or 0) for r in rooms)},
        'courses': {**_activity(courses), 'by_program': _grouped(courses, 'program')},
    }


def validate_data(db: Session) -> Dict:
    """Readiness report: is there enough clean data to build a timetable from?"""
    teachers = [t for t in db.query(models.Teacher).all() if is_active(t)]
    rooms = [r for r in db.query(models.Room).all() if is_active(r)]
    courses = [c for c in db.query(models.Course).all() if is_active(c)]

    report = {
        'teachers': {'count': len(teachers), 'issues': []},
        'classrooms': {'count': len(rooms), 'issues': []},
        'courses': {'count': len(courses), 'issues': []},
    }
    for t in teachers:
        if not t.subjects:
            report['teachers']['issues'].append(f'Teacher "{t.name}" has no subjects assigned')
        if not t.email:
            report['teachers']['issues'].append(f'Teacher "{t.name}" has no email address')
    for r in rooms:
        if not r.capacity or r.capacity <= 0:
            report['classrooms']['issues'].append(f'Classroom "{r.name}" has invalid capacity')
        if not r.type:
            report['classrooms']['issues'].append(f'Classroom "{r.name}" has no type specified')
    known_codes = {c.code for c in courses}
    for c in courses:
        if not c.code:
            report['courses']['issues'].append(f'Course "{c.name}" has no course code')
        if not c.program:
            report['courses']['issues'].append(f'Course "{c.code}" has no program')
        for p in c.prerequisites or []:
            if p not in known_codes:
                report['courses']['issues'].append(f'Course "{c.code}" requires unknown course "{p}"')

    for section in report.values():
        section['status'] = 'valid' if not section['issues'] else 'issues'
    has_minimum = all(report[k]['count'] >= 1 for k in ('teachers', 'classrooms', 'courses'))
    no_issues = all(report[k]['status'] == 'valid' for k in ('teachers', 'classrooms', 'courses'))
    ready = has_minimum and no_issues
    report['overall'] = {'ready': ready, 'status': 'ready' if ready else 'not_ready'}
    return report


def dashboard_overview(db: Session) -> Dict:
    timetables = list_timetables(db)
    statuses = Counter(t.status for t in timetables)
    return {
        'counts': {
            'teachers': sum(1 for t in db.query(models.Teacher).all() if is_active(t)),
            'classrooms': sum(1 for r in db.query(models.Room).all() if is_active(r)),
            'courses': sum(1 for c in db.query(models.Course).all() if is_active(c)),
            'timetables': len(timetables),
        },
        'status_distribution': [{'status': s, 'count': n} for s, n in sorted(statuses.items())],
        'recent_timetables': [schemas.as_dict(schemas.TimetableSummary.model_validate(t)) for t in timetables[:5]],
    }


def student_stats(db: Session, program: Optional[str] = None) -> Dict:
    """Weekly load for a program across published timetables."""
    q = db.query(models.TimetableEntry).join(models.Timetable).filter(models.Timetable.status == 'published')
    if program:
        q = q.filter(models.TimetableEntry.program == program)
    entries = q.all()
    per_day = Counter(e.day for e in entries)
    return {
        'program': program,
        'classes_per_week': len(entries),
        'hours_per_week': _entry_hours(entries),
        'courses': len({e.course_code for e in entries if e.course_code}),
        'teachers': len({e.teacher for e in entries if e.teacher}),
        'classes_per_day': {d: per_day.get(d, 0) for d in schemas.DAYS if per_day.get(d)},
    }


# ---------------- analytics ----------------

CAPACITY_BUCKETS = [0, 20, 50, 100, 200, 500]
WORKLOAD_BUCKETS = [0, 10, 20, 30, 40, 50]


def _bucket_label(value, boundaries) -> str:
    for low, high in zip(boundaries, boundaries[1:]):
        if low <= value < high:
            return f'{low}-{high - 1}'
    return f'{boundaries[-1]}+'


def _buckets(items, boundaries, value_of) -> List[Dict]:
    """Histogram over ``boundaries`` (every bucket listed, empty ones with count 0)."""
    labels = [f'{low}-{high - 1}' for low, high in zip(boundaries, boundaries[1:])] + [f'{boundaries[-1]}+']
    grouped = {label: [] for label in labels}
    for item in items:
        grouped[_bucket_label(value_of(item), boundaries)].append(item)
    return [{'bucket': label, 'count': len(members), 'members': members} for label, members in grouped.items()]


def _avg(values) -> float:
    values = list(values)
    return round(sum(values) / len(values), 2) if values else 0.0


def _entry_hours(entries) -> float:
    minutes = 0
    for e in entries:
        start, end = schemas.parse_range(f"{e.start_time}-{e.end_time}")
        minutes += end - start
    return round(minutes / 60, 2)


def teacher_analytics(db: Session, department: Optional[str] = None) -> Dict:
    """Active teachers by designation and department, plus scheduled workload from published timetables."""
    teachers = [t for t in list_records(db, models.Teacher, {'department': department} if department else None)
                if is_active(t)]
    published = (db.query(models.TimetableEntry).join(models.Timetable)
                 .filter(models.Timetable.status == 'published').all())
    scheduled = {t.name: _entry_hours([e for e in published if e.teacher == t.name]) for t in teachers}

    by_designation = {}
    for t in teachers:
        by_designation.setdefault(t.designation or 'Unknown', []).append(t)
    by_department = {}
    for t in teachers:
        by_department.setdefault(t.department or 'Unknown', []).append(t)

    workload = _buckets(teachers, WORKLOAD_BUCKETS, lambda t: scheduled[t.name])
    for bucket in workload:
        bucket['teachers'] = [{'name': t.name, 'hours': scheduled[t.name]} for t in bucket.pop('members')]
    return {
        'filters': {'department': department},
        'by_designation': [
            {'key': k, 'count': len(ts), 'avg_max_hours': _avg(t.max_hours_per_week or 0 for t in ts)}
            for k, ts in sorted(by_designation.items())
        ],
        'department_distribution': [
            {'department': k, 'count': len(ts), 'designations': sorted({t.designation for t in ts if t.designation})}
            for k, ts in sorted(by_department.items())
        ],
        'workload_distribution': workload,
        'summary': {
            'total_teachers': len(teachers),
            'avg_max_hours': _avg(t.max_hours_per_week or 0 for t in teachers),
            'total_scheduled_hours': round(sum(scheduled.values()), 2),
        },
    }


def classroom_analytics(db: Session, building: Optional[str] = None) -> Dict:
    """Active rooms by type, capacity band and building, plus how often each feature appears."""
    rooms = [r for r in list_records(db, models.Room, {'building': building} if building else None)
             if is_active(r)]

    by_type = {}
    for r in rooms:
        by_type.setdefault(r.type or 'Unknown', []).append(r)
    by_building = {}
    for r in rooms:
        by_building.setdefault(r.building or 'Unknown', []).append(r)
    features = {}
    for r in rooms:
        for f in r.features or []:
            features.setdefault(f, []).append(r.name)

    capacity = _buckets(rooms, CAPACITY_BUCKETS, lambda r: r.capacity or 0)
    for bucket in capacity:
        bucket['rooms'] = [{'name': r.name, 'capacity': r.capacity} for r in bucket.pop('members')]
    return {
        'filters': {'building': building},
        'by_type': [
            {'key': k, 'count': len(rs), 'avg_capacity': _avg(r.capacity or 0 for r in rs),
             'total_capacity': sum(r.capacity or 0 for r in rs)}
            for k, rs in sorted(by_type.items())
        ],
        'capacity_distribution': capacity,
        'building_distribution': [
            {'building': k, 'count': len(rs), 'floors': sorted({r.floor for r in rs if r.floor}),
             'total_capacity': sum(r.capacity or 0 for r in rs)}
            for k, rs in sorted(by_building.items())
        ],
        'feature_utilization': [
            {'feature': f, 'count': len(names), 'rooms': sorted(names)}
            for f, names in sorted(features.items(), key=lambda kv: (-len(kv[1]), kv[0]))
        ],
        'summary': {
            'total_classrooms': len(rooms),
            'avg_capacity': _avg(r.capacity or 0 for r in rooms),
            'total_capacity': sum(r.capacity or 0 for r in rooms),
        },
    }


def _course_hours(c) -> int:
    return (c.hours_per_week or 0) + ((c.lab_hours or 0) if c.has_lab else 0)


def course_analytics(db: Session, program: Optional[str] = None) -> Dict:
    """Active courses by type, semester, program and lab requirement."""
    courses = [c for c in list_records(db, models.Course, {'program': program} if program else None)
               if is_active(c)]

    groups = {'type': {}, 'semester': {}, 'program': {}, 'has_lab': {}}
    for c in courses:
        groups['type'].setdefault(c.type or 'Unknown', []).append(c)
        groups['semester'].setdefault(c.semester, []).append(c)
        groups['program'].setdefault(c.program or 'Unknown', []).append(c)
        groups['has_lab'].setdefault(bool(c.has_lab), []).append(c)

    def listing(cs):
        return [{'code': c.code, 'name': c.name} for c in cs]

    return {
        'filters': {'program': program},
        'by_type': [
            {'key': k, 'count': len(cs), 'avg_hours_per_week': _avg(c.hours_per_week or 0 for c in cs),
             'total_hours': sum(_course_hours(c) for c in cs)}
            for k, cs in sorted(groups['type'].items())
        ],
        'semester_distribution': [
            {'semester': k, 'count': len(cs), 'courses': listing(cs)}
            for k, cs in sorted(groups['semester'].items())
        ],
        'program_distribution': [
            {'program': k, 'count': len(cs), 'total_hours': sum(_course_hours(c) for c in cs)}
            for k, cs in sorted(groups['program'].items())
        ],
        'lab_requirements': [
            {'has_lab': k, 'count': len(cs), 'courses': listing(cs)}
            for k, cs in sorted(groups['has_lab'].items())
        ],
        'summary': {
            'total_courses': len(courses),
            'avg_hours_per_week': _avg(c.hours_per_week or 0 for c in courses),
            'total_hours': sum(_course_hours(c) for c in courses),
        },
    }


def timetable_analytics(db: Session, status: Optional[str] = None) -> Dict:
    """Timetables by status and department, with entry counts and scheduled hours."""
    timetables = list_timetables(db, status=status)
    hours = {t.id: _entry_hours(t.entries) for t in timetables}

    by_status = {}
    for t in timetables:
        by_status.setdefault(t.status, []).append(t)
    by_department = {}
    for t in timetables:
        by_department.setdefault(t.department or 'Unknown', []).append(t)
    return {
        'filters': {'status': status},
        'by_status': [
            {'status': k, 'count': len(ts), 'avg_entries': _avg(len(t.entries) for t in ts),
             'total_entries': sum(len(t.entries) for t in ts), 'total_hours': round(sum(hours[t.id] for t in ts), 2)}
            for k, ts in sorted(by_status.items())
        ],
        'department_distribution': [
            {'department': k, 'count': len(ts), 'semesters': sorted({t.semester for t in ts if t.semester}),
             'academic_years': sorted({t.academic_year for t in ts if t.academic_year})}
            for k, ts in sorted(by_department.items())
        ],
        'summary': {
            'total_timetables': len(timetables),
            'total_entries': sum(len(t.entries) for t in timetables),
            'total_hours': round(sum(hours.values()), 2),
        },
    }


ANALYTICS = {
    'teachers': (teacher_analytics, 'department'),
    'classrooms': (classroom_analytics, 'building'),
    'courses': (course_analytics, 'program'),
    'timetables': (timetable_analytics, 'status'),
}
