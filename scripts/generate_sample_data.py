import argparse
import csv
import logging
import os
import random

from backend import csv_io
from client.samples import TIMETABLE_ENTRIES, sample_records

logger = logging.getLogger(__name__)

TIMETABLE_COLUMNS = ['day', 'start_time', 'end_time', 'course_code', 'course_name', 'session_type', 'teacher',
                     'classroom', 'program', 'student_count']


class _Row:
    """Attribute view over a sample dict, the shape csv_io.write_csv reads."""

    def __init__(self, data):
        self.__dict__.update(data)


def write_resources(out_dir='data'):
    os.makedirs(out_dir, exist_ok=True)
    for resource in csv_io.COLUMNS:
        path = os.path.join(out_dir, f'{resource}.csv')
        rows = [_Row(r) for r in sample_records(resource)]
        with open(path, 'w', newline='', encoding='utf-8') as f:
            f.write(csv_io.write_csv(resource, rows))
        logger.info(f"Wrote {len(rows)} {resource} to {path}")


def write_timetable(out_dir='data', extra=0, seed=1):
    """Sample schedule plus ``extra`` random classes in free (day, room, slot) cells."""
    rng = random.Random(seed)
    entries = [dict(e) for e in TIMETABLE_ENTRIES]
    taken = {(e['day'], e['classroom'], e['start_time']) for e in entries}
    rooms = [r['id'] for r in sample_records('classrooms')]
    courses = sample_records('courses')
    teachers = sample_records('teachers')
    days = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday']
    hours = ['09', '10', '11', '14', '15', '16']
    attempts = 0
    while extra > 0 and attempts < 1000:
        attempts += 1
        day, room, hour = rng.choice(days), rng.choice(rooms), rng.choice(hours)
        start = f'{hour}:00'
        if (day, room, start) in taken:
            continue
        course = rng.choice(courses)
        taken.add((day, room, start))
        entries.append({
            'day': day, 'start_time': start, 'end_time': f'{int(hour) + 1:02d}:00',
            'course_code': course['code'], 'course_name': course['name'], 'session_type': 'Lecture',
            'teacher': rng.choice(teachers)['name'], 'classroom': room,
            'program': f"{course['program']} - Sem {course['semester']}", 'student_count': rng.randint(20, 60),
        })
        extra -= 1

    path = os.path.join(out_dir, 'timetable.csv')
    with open(path, 'w', newline='', encoding='utf-8') as f:
        w = csv.DictWriter(f, fieldnames=TIMETABLE_COLUMNS)
        w.writeheader()
        w.writerows(entries)
    logger.info(f"Wrote {len(entries)} timetable entries to {path}")


def generate(out_dir='data', extra=0, seed=1):
    write_resources(out_dir)
    write_timetable(out_dir, extra, seed)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    p = argparse.ArgumentParser(description='Write the sample classrooms/teachers/courses/timetable CSVs')
    p.add_argument('--out', default='data', help='output directory')
    p.add_argument('--extra', type=int, default=0, help='random classes to add on top of the sample schedule')
    p.add_argument('--seed', type=int, default=1)
    args = p.parse_args()
    generate(args.out, args.extra, args.seed)
