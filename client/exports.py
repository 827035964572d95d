"""
client/exports.py

Schedule downloads built in memory: CSV, JSON and a printable HTML page.
"""

import csv
import html
import io
import json
from typing import Any, Dict, Iterable, List

CSV_HEADER = ['Day', 'StartTime', 'EndTime', 'CourseCode', 'CourseName', 'SessionType', 'Teacher',
              'Classroom', 'StudentCount']
CSV_FIELDS = ['day', 'start_time', 'end_time', 'course_code', 'course_name', 'session_type', 'teacher',
              'classroom', 'student_count']


def schedule_to_csv(entries: Iterable[Dict[str, Any]]) -> str:
    out = io.StringIO()
    w = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator='\n')
    w.writerow(CSV_HEADER)
    for e in entries:
        w.writerow(['' if e.get(f) is None else e.get(f) for f in CSV_FIELDS])
    return out.getvalue()


def schedule_to_json(entries: Iterable[Dict[str, Any]]) -> str:
    return json.dumps(list(entries), indent=2)


def schedule_to_print_html(entries: Iterable[Dict[str, Any]], title: str = 'Timetable') -> str:
    """Standalone HTML document holding one table of the schedule."""
    rows: List[str] = []
    for e in entries:
        cells = ''.join(f"<td>{html.escape(str(e.get(f, '')))}</td>" for f in CSV_FIELDS)
        rows.append(f"<tr>{cells}</tr>")
    head = ''.join(f"<th>{h}</th>" for h in CSV_HEADER)
    return (
        "<!DOCTYPE html>\n"
        f"<html><head><meta charset=\"utf-8\"><title>{html.escape(title)}</title>"
        "<style>table{border-collapse:collapse}th,td{border:1px solid #999;padding:4px 8px}</style>"
        "</head><body>"
        f"<h1>{html.escape(title)}</h1>"
        f"<table><thead><tr>{head}</tr></thead><tbody>{''.join(rows)}</tbody></table>"
        "</body></html>\n"
    )
