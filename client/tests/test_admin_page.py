from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from client.tests.fakes import strip_id

ADMIN_PAGE = str(Path(__file__).resolve().parents[2] / 'streamlit_admin' / 'admin.py')


@pytest.fixture
def admin_app(api, context):
    at = AppTest.from_file(ADMIN_PAGE, default_timeout=30)
    # the page reuses whatever client the session already holds for this API base
    at.session_state['context'] = context
    at.session_state[f'api::{context.api_base}'] = api
    return at


def _save(at):
    next(b for b in at.button if b.label == 'Save').click().run()


def test_saving_untouched_edit_keeps_free_text_values(admin_app, api, rooms):
    draft = dict(strip_id(rooms[0]), building='North Wing', floor='Mezzanine')
    room_id = api.create_classroom(draft)['id']

    admin_app.run()
    assert not admin_app.exception
    admin_app.button(key=f'edit_{room_id}').click().run()
    _save(admin_app)

    assert not admin_app.exception
    assert strip_id(api.get('classrooms', room_id)) == draft


def test_saving_untouched_teacher_edit(admin_app, api, teachers):
    draft = dict(strip_id(teachers[0]), department='Data Science', designation='Visiting Fellow')
    teacher_id = api.create_teacher(draft)['id']

    admin_app.run()
    admin_app.sidebar.radio[0].set_value('Teachers').run()
    admin_app.button(key=f'edit_{teacher_id}').click().run()
    _save(admin_app)

    assert not admin_app.exception
    after = api.get('teachers', teacher_id)
    assert (after['department'], after['designation']) == ('Data Science', 'Visiting Fellow')
