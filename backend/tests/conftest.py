import os

os.environ['TIMETABLE_DATABASE_URL'] = 'sqlite://'
os.environ.pop('TIMETABLE_SEED_DIR', None)

import pytest
from fastapi.testclient import TestClient

from backend.init_db import create_all, drop_all
from backend.main import app


@pytest.fixture
def client():
    create_all()
    with TestClient(app) as c:
        yield c
    drop_all()


@pytest.fixture
def room_payload():
    return {
        'name': 'Room 101',
        'building': 'Main Building',
        'floor': '1st Floor',
        'type': 'Lecture Hall',
        'capacity': 60,
        'features': ['Projector', 'AC'],
        'availability': {'Monday': ['09:00-12:00', '14:00-17:00']},
        'status': 'Active',
    }


@pytest.fixture
def teacher_payload():
    return {
        'name': 'Dr. Sarah Johnson',
        'email': 'sarah.johnson@university.edu',
        'department': 'Computer Science',
        'designation': 'Professor',
        'subjects': ['Algorithms'],
        'max_hours_per_week': 20,
        'availability': {'Monday': {'available': True, 'start_time': '09:00', 'end_time': '17:00'}},
        'priority': 'high',
    }


@pytest.fixture
def course_payload():
    return {
        'name': 'Data Structures',
        'code': 'CS201',
        'program': 'B.Tech Computer Science',
        'semester': 3,
        'credits': 4,
        'type': 'Theory',
        'hours_per_week': 4,
        'has_lab': True,
        'lab_hours': 2,
        'prerequisites': ['CS101'],
    }
