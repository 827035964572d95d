import os

os.environ['TIMETABLE_DATABASE_URL'] = 'sqlite://'
os.environ.pop('TIMETABLE_SEED_DIR', None)

import pytest
from fastapi.testclient import TestClient

from backend.init_db import create_all, drop_all
from backend.main import app
from client.api import ApiClient
from client.context import AppContext
from client.samples import sample_records


@pytest.fixture
def context():
    return AppContext(api_base='http://testserver', token='secret-token')


@pytest.fixture
def api(context):
    create_all()
    with TestClient(app) as c:
        yield ApiClient(context, session=c)
    drop_all()


@pytest.fixture
def rooms():
    return sample_records('classrooms')


@pytest.fixture
def teachers():
    return sample_records('teachers')


@pytest.fixture
def courses():
    return sample_records('courses')

