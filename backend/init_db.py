import csv
import logging
import os

from .database import engine, SessionLocal, Base
from . import models, csv_io, schemas

logger = logging.getLogger(__name__)

SEED_FILES = {
    'classrooms': 'classrooms.csv',
    'teachers': 'teachers.csv',
    'courses': 'courses.csv',
}
TIMETABLE_FILE = 'timetable.csv'


def create_all():
    Base.metadata.create_all(bind=engine)


def drop_all():
    Base.metadata.drop_all(bind=engine)


def populate_from_csv(seed_dir='data'):
    """Reload every table from the CSV files in ``seed_dir``."""
    create_all()
    missing = [f for f in list(SEED_FILES.values()) + [TIMETABLE_FILE]
               if not os.path.exists(os.path.join(seed_dir, f))]
    if missing:
        logger.warning(f"Seed files missing in {seed_dir}: {', '.join(missing)}. Run the generator script first.")
        return False

    db = SessionLocal()
    try:
        # Always reload from CSV: clear existing data
        db.query(models.TimetableComment).delete()
        db.query(models.TimetableEntry).delete()
        db.query(models.Timetable).delete()
        db.query(models.Course).delete()
        db.query(models.Teacher).delete()
        db.query(models.Room).delete()
        db.commit()

        for resource, filename in SEED_FILES.items():
            model = {'classrooms': models.Room, 'teachers': models.Teacher, 'courses': models.Course}[resource]
            with open(os.path.join(seed_dir, filename), newline='', encoding='utf-8') as f:
                payloads, errors = csv_io.read_csv(resource, f.read())
            for error in errors:
                logger.warning(f"{filename}: {error}")
            for payload in payloads:
                db.add(model(**payload))
            db.commit()
            logger.info(f"Loaded {len(payloads)} {resource}.")

        _load_timetable(db, os.path.join(seed_dir, TIMETABLE_FILE))
        return True
    finally:
        db.close()


def _load_timetable(db, path):
    # one published sample timetable holding every row of the file
    with open(path, newline='', encoding='utf-8') as f:
        rows = list(csv.DictReader(f))
    t = models.Timetable(name='Sample Timetable', academic_year='2024-25', semester=1,
                         department='Computer Science', year=1, status='published',
                         published_at=models.utcnow())
    for row in rows:
        entry = schemas.EntryIn(
            day=row['day'],
            start_time=row['start_time'],
            end_time=row['end_time'],
            course_code=row.get('course_code') or '',
            course_name=row.get('course_name') or '',
            session_type=row.get('session_type') or 'Lecture',
            teacher=row.get('teacher') or '',
            classroom=row.get('classroom') or '',
            program=row.get('program') or '',
            student_count=int(row.get('student_count') or 0),
        )
        t.entries.append(models.TimetableEntry(**entry.model_dump()))
    db.add(t)
    db.commit()
    logger.info(f"Loaded timetable with {len(rows)} entries.")
