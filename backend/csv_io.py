"""CSV import/export for classrooms, teachers and courses.

List-valued columns and nested availability maps travel as JSON strings.
On import a list cell that is not a JSON array is read as comma separated,
which is what hand-written spreadsheets contain.
"""

import csv
import io
import json
from typing import Dict, Iterable, List, Tuple

from pydantic import ValidationError

from . import schemas

COLUMNS = {
    'classrooms': ['id', 'name', 'building', 'floor', 'type', 'capacity', 'features', 'availability', 'status'],
    'teachers': ['id', 'name', 'email', 'phone', 'department', 'designation', 'qualification', 'experience',
                 'subjects', 'max_hours_per_week', 'availability', 'priority', 'status'],
    'courses': ['id', 'name', 'code', 'program', 'semester', 'credits', 'type', 'hours_per_week', 'has_lab',
                'lab_hours', 'prerequisites', 'status'],
}

LIST_FIELDS = {'features', 'subjects', 'prerequisites'}
JSON_FIELDS = {'availability'}
BOOL_FIELDS = {'has_lab'}

INPUT_SCHEMAS = {
    'classrooms': schemas.RoomIn,
    'teachers': schemas.TeacherIn,
    'courses': schemas.CourseIn,
}


def _cell(field, value):
    if value is None:
        return ''
    if field in LIST_FIELDS:
        return json.dumps(list(value))
    if field in JSON_FIELDS:
        return json.dumps(value, sort_keys=True)
    if field in BOOL_FIELDS:
        return 'true' if value else 'false'
    return value


def _value(field, raw):
    raw = (raw or '').strip()
    if field in LIST_FIELDS:
        if raw.startswith('['):
            return [str(v).strip() for v in json.loads(raw) if str(v).strip()]
        return [v.strip() for v in raw.split(',') if v.strip()]
    if field in JSON_FIELDS:
        return json.loads(raw) if raw else {}
    if field in BOOL_FIELDS:
        return raw.lower() in ('1', 'true', 'yes', 'y')
    if raw == '':
        return None
    return raw


def row_to_payload(resource: str, row: Dict[str, str]) -> Dict:
    """Validate one CSV row; raises ValueError/ValidationError on bad input"""
    data = {}
    for field in COLUMNS[resource]:
        if field == 'id' or field not in row:
            continue
        value = _value(field, row.get(field))
        if value is not None:
            data[field] = value
    return INPUT_SCHEMAS[resource].model_validate(data).model_dump()


def read_csv(resource: str, text: str) -> Tuple[List[Dict], List[str]]:
    """Parse an uploaded CSV into validated payloads plus per-row error messages."""
    reader = csv.DictReader(io.StringIO(text))
    payloads, errors = [], []
    for i, row in enumerate(reader, start=1):
        try:
            payloads.append(row_to_payload(resource, row))
        except ValidationError as e:
            problems = '; '.join(f"{'.'.join(map(str, err['loc'])) or 'row'}: {err['msg']}" for err in e.errors())
            errors.append(f'Row {i}: {problems}')
        except ValueError as e:
            errors.append(f'Row {i}: {e}')
    return payloads, errors


def write_csv(resource: str, records: Iterable) -> str:
    out = io.StringIO()
    w = csv.writer(out, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
    columns = COLUMNS[resource]
    w.writerow(columns)
    for r in records:
        w.writerow([_cell(c, getattr(r, c)) for c in columns])
    return out.getvalue()
