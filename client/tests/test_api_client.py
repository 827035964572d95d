import pytest
import requests

from client.api import ApiClient
from client.context import AppContext
from client.errors import ApiError, NotFoundError, ResponseSchemaError
from client.samples import sample_entries
from client.tests.fakes import FakeResponse, FakeSession, strip_id


def _timetable(status='draft'):
    return {
        'name': 'Computer Science Sem 3',
        'academic_year': '2024-25',
        'semester': 1,
        'department': 'Computer Science',
        'year': 2,
        'status': status,
        'entries': sample_entries(),
    }


def test_classroom_round_trip(api, rooms):
    created = api.create_classroom(strip_id(rooms[0]))
    assert strip_id(created) == strip_id(rooms[0])
    assert [r['id'] for r in api.get_classrooms()] == [created['id']]

    draft = strip_id(rooms[0])
    draft['status'] = 'Maintenance'
    assert api.update_classroom(created['id'], draft)['status'] == 'Maintenance'
    assert api.get('classrooms', created['id'])['status'] == 'Maintenance'

    assert api.delete_classroom(created['id']) == 'Classroom deleted successfully'
    assert api.get_classrooms() == []


def test_teacher_and_course_wrappers(api, teachers, courses):
    teacher = api.create_teacher(strip_id(teachers[0]))
    course = api.create_course(strip_id(courses[0]))
    assert api.get_teachers()[0]['availability']['Saturday']['available'] is False
    assert api.get_courses()[0]['code'] == 'CS201'

    draft = strip_id(courses[0])
    draft['credits'] = 5
    assert api.update_course(course['id'], draft)['credits'] == 5
    api.update_teacher(teacher['id'], dict(strip_id(teachers[0]), priority='low'))
    assert api.get_teachers()[0]['priority'] == 'low'

    api.delete_teacher(teacher['id'])
    api.delete_course(course['id'])
    assert api.get_teachers() == [] and api.get_courses() == []


def test_unknown_record_raises_not_found(api):
    with pytest.raises(NotFoundError) as excinfo:
        api.get('teachers', 'missing')
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == 'Teacher not found'


def test_validation_error_details(api, rooms):
    draft = strip_id(rooms[0])
    draft['capacity'] = 0
    with pytest.raises(ApiError) as excinfo:
        api.create_classroom(draft)
    assert excinfo.value.status_code == 422
    assert excinfo.value.message == 'Validation failed'
    assert any(d.startswith('capacity') for d in excinfo.value.details)


def test_duplicate_course_code_conflicts(api, courses):
    api.create_course(strip_id(courses[0]))
    with pytest.raises(ApiError) as excinfo:
        api.create_course(strip_id(courses[0]))
    assert excinfo.value.status_code == 409


def test_unknown_resource_rejected(api):
    with pytest.raises(ValueError):
        api.list('buildings')


def test_csv_export_and_import(api, teachers):
    for t in teachers:
        api.create_teacher(strip_id(t))
    exported = api.export_csv('teachers')
    assert exported.startswith(b'id,name,email')

    for t in api.get_teachers():
        api.delete_teacher(t['id'])
    result = api.import_csv('teachers', 'teachers.csv', exported)
    assert result == {'imported': 3, 'errors': []}
    names = [t['name'] for t in api.get_teachers()]
    assert names == sorted(t['name'] for t in teachers)


def test_csv_import_without_valid_rows(api):
    with pytest.raises(ApiError) as excinfo:
        api.import_csv('courses', 'courses.csv', b'name,code,semester,hours_per_week\nBroken,,0,0\n')
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == 'No valid records found'
    assert excinfo.value.details[0].startswith('Row 1')


def test_timetable_lifecycle(api):
    created = api.create_timetable(_timetable())
    tid = created['id']
    assert len(created['entries']) == 8

    summary = api.get_timetable(tid, projection='summary')
    assert 'entries' not in summary
    assert api.get_timetable(tid)['entries'][0]['day'] == 'Monday'

    published = api.update_timetable_status(tid, 'published')
    assert published['status'] == 'published'
    assert published['published_at'] is not None

    comment = api.add_timetable_comment(tid, 'Move the Monday lab to the afternoon')
    assert comment['text'].startswith('Move')
    assert [t['id'] for t in api.get_timetables({'status': 'published', 'department': 'all'})] == [tid]
    assert api.get_timetables({'status': 'draft'}) == []

    with pytest.raises(ApiError) as excinfo:
        api.update_timetable_status(tid, 'finished')
    assert excinfo.value.status_code == 400

    assert api.delete_timetable(tid) == 'Timetable deleted successfully'
    with pytest.raises(NotFoundError):
        api.get_timetable(tid)


def test_dashboards(api, rooms, teachers, courses):
    for r in rooms:
        api.create_classroom(strip_id(r))
    for t in teachers:
        api.create_teacher(strip_id(t))
    api.create_timetable(_timetable('published'))

    stats = api.get_data_statistics()
    assert stats['classrooms']['total'] == 4
    assert stats['classrooms']['total_capacity'] == 170
    assert stats['teachers']['by_department'] == [
        {'key': 'Computer Science', 'count': 2}, {'key': 'Mathematics', 'count': 1}]

    report = api.validate_data()
    assert report['overall']['ready'] is False

    overview = api.get_dashboard_overview()
    assert overview['counts']['timetables'] == 1

    student = api.get_student_stats('Computer Science - Sem 3')
    assert student['classes_per_week'] == 1
    assert student['hours_per_week'] == 1.0
    everyone = api.get_student_stats()
    assert everyone['classes_per_week'] == 8
    assert everyone['hours_per_week'] == 10.0
    assert everyone['teachers'] == 3


def test_health_up(api):
    status = api.health()
    assert status['status'] == 'up'
    assert status['error'] is None


def test_health_down_never_raises():
    client = ApiClient(AppContext(api_base='http://api'),
                       session=FakeSession(requests.ConnectionError('connection refused')))
    status = client.health()
    assert status['status'] == 'down'
    assert 'connection refused' in status['error']


def test_bearer_token_sent(context):
    session = FakeSession(FakeResponse(200, {'data': [], 'total': 0}))
    ApiClient(context, session=session).get_courses()
    method, url, kwargs = session.calls[0]
    assert (method, url) == ('GET', 'http://testserver/api/courses')
    assert kwargs['headers']['Authorization'] == 'Bearer secret-token'
    assert kwargs['timeout'] == context.timeout


def test_no_token_no_auth_header():
    session = FakeSession(FakeResponse(200, {'data': [], 'total': 0}))
    ApiClient(AppContext(api_base='http://api/'), session=session).get_courses()
    method, url, kwargs = session.calls[0]
    assert url == 'http://api/api/courses'
    assert 'Authorization' not in kwargs['headers']


@pytest.mark.parametrize('body', [
    {'courses': []},
    {'data': [], 'total': 0, 'success': True},
    {'data': {'id': 'C1'}, 'total': 1},
    {'data': [{'name': 'No code'}], 'total': 1},
])
def test_unexpected_envelope_fails_loudly(body):
    client = ApiClient(AppContext(api_base='http://api'), session=FakeSession(FakeResponse(200, body)))
    with pytest.raises(ResponseSchemaError):
        client.get_courses()


def test_non_json_body_is_schema_error():
    session = FakeSession(FakeResponse(200, None, content=b'<html>proxy error</html>'))
    with pytest.raises(ResponseSchemaError):
        ApiClient(AppContext(api_base='http://api'), session=session).get_teachers()


def test_server_error_without_json_body():
    session = FakeSession(FakeResponse(502, None, content=b'Bad Gateway'))
    with pytest.raises(ApiError) as excinfo:
        ApiClient(AppContext(api_base='http://api'), session=session).get_teachers()
    assert excinfo.value.status_code == 502
    assert excinfo.value.message == 'HTTP 502'


def test_list_filters_and_analytics(api, rooms, teachers):
    for r in rooms:
        api.create_classroom(strip_id(r))
    for t in teachers:
        api.create_teacher(strip_id(t))

    assert [r['name'] for r in api.get_classrooms({'building': 'Main Building', 'type': 'all'})] == [
        'Room 101', 'Room 102']
    assert [t['department'] for t in api.get_teachers({'department': 'Mathematics'})] == ['Mathematics']

    analytics = api.get_analytics('classrooms')
    assert analytics['summary']['total_capacity'] == 170
    assert sum(b['count'] for b in analytics['capacity_distribution']) == 4
    assert api.get_analytics('teachers', {'department': 'all'})['summary']['total_teachers'] == 3

    with pytest.raises(NotFoundError):
        api.get_analytics('buildings')
    with pytest.raises(ApiError) as excinfo:
        api.get_classrooms({'colour': 'red'})
    assert excinfo.value.status_code == 400
