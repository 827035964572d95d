def test_health(client):
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json().get('status') == 'ok'


def test_classrooms_empty(client):
    r = client.get('/api/classrooms')
    assert r.status_code == 200
    assert r.json() == {'data': [], 'total': 0}


def test_classroom_crud(client, room_payload):
    r = client.post('/api/classrooms', json=room_payload)
    assert r.status_code == 201
    created = r.json()['data']
    room_id = created['id']
    assert created['name'] == 'Room 101'

    room_payload['capacity'] = 75
    r = client.put(f'/api/classrooms/{room_id}', json=room_payload)
    assert r.status_code == 200
    assert r.json()['data']['capacity'] == 75

    r = client.get(f'/api/classrooms/{room_id}')
    assert r.json()['data']['features'] == ['Projector', 'AC']

    r = client.delete(f'/api/classrooms/{room_id}')
    assert r.status_code == 200
    assert client.get('/api/classrooms').json()['total'] == 0


def test_server_assigns_unique_ids(client, room_payload):
    ids = {client.post('/api/classrooms', json=room_payload).json()['data']['id'] for _ in range(3)}
    assert len(ids) == 3


def test_unknown_record_is_404(client, room_payload):
    assert client.get('/api/classrooms/nope').status_code == 404
    assert client.put('/api/classrooms/nope', json=room_payload).status_code == 404
    assert client.delete('/api/teachers/nope').status_code == 404


def test_classroom_rejects_bad_capacity(client, room_payload):
    room_payload['capacity'] = 0
    assert client.post('/api/classrooms', json=room_payload).status_code == 422


def test_classroom_rejects_overlapping_availability(client, room_payload):
    room_payload['availability'] = {'Monday': ['09:00-12:00', '11:00-13:00']}
    assert client.post('/api/classrooms', json=room_payload).status_code == 422


def test_classroom_rejects_unknown_feature(client, room_payload):
    room_payload['features'] = ['Teleporter']
    assert client.post('/api/classrooms', json=room_payload).status_code == 422


def test_teacher_crud(client, teacher_payload):
    r = client.post('/api/teachers', json=teacher_payload)
    assert r.status_code == 201
    teacher = r.json()['data']
    assert teacher['availability']['Monday']['available'] is True
    assert teacher['status'] == 'Active'


def test_teacher_rejects_inverted_hours(client, teacher_payload):
    teacher_payload['availability'] = {'Friday': {'available': True, 'start_time': '17:00', 'end_time': '09:00'}}
    assert client.post('/api/teachers', json=teacher_payload).status_code == 422


def test_course_lab_requires_lab_hours(client, course_payload):
    course_payload['lab_hours'] = None
    assert client.post('/api/courses', json=course_payload).status_code == 422


def test_duplicate_course_code_conflicts(client, course_payload):
    assert client.post('/api/courses', json=course_payload).status_code == 201
    r = client.post('/api/courses', json=course_payload)
    assert r.status_code == 409
    assert client.get('/api/courses').json()['total'] == 1


def test_csv_export_then_import(client, course_payload):
    client.post('/api/courses', json=course_payload)
    exported = client.get('/api/courses/export')
    assert exported.status_code == 200
    assert exported.headers['content-type'].startswith('text/csv')
    assert 'CS201' in exported.text

    client.delete(f"/api/courses/{client.get('/api/courses').json()['data'][0]['id']}")
    r = client.post('/api/courses/import', files={'file': ('courses.csv', exported.content, 'text/csv')})
    assert r.status_code == 200
    assert r.json()['data']['imported'] == 1
    course = client.get('/api/courses').json()['data'][0]
    assert course['prerequisites'] == ['CS101']
    assert course['has_lab'] is True


def test_csv_list_cells_keep_commas(client, teacher_payload):
    teacher_payload['subjects'] = ['Algorithms, Advanced', 'Compilers']
    client.post('/api/teachers', json=teacher_payload)
    exported = client.get('/api/teachers/export')
    assert '"[""Algorithms, Advanced"", ""Compilers""]"' in exported.text

    client.delete(f"/api/teachers/{client.get('/api/teachers').json()['data'][0]['id']}")
    r = client.post('/api/teachers/import', files={'file': ('teachers.csv', exported.content, 'text/csv')})
    assert r.json()['data'] == {'imported': 1, 'errors': []}
    assert client.get('/api/teachers').json()['data'][0]['subjects'] == ['Algorithms, Advanced', 'Compilers']


def test_csv_import_accepts_comma_separated_lists(client):
    body = 'name,building,type,capacity,features\nRoom 1,Main Building,Lecture Hall,40,"Projector, AC"\n'
    r = client.post('/api/classrooms/import', files={'file': ('rooms.csv', body.encode(), 'text/csv')})
    assert r.json()['data']['imported'] == 1
    assert client.get('/api/classrooms').json()['data'][0]['features'] == ['Projector', 'AC']


def test_csv_import_reports_bad_rows(client):
    body = 'name,building,type,capacity\nRoom 1,Main Building,Lecture Hall,40\nRoom 2,Main Building,Lecture Hall,abc\n'
    r = client.post('/api/classrooms/import', files={'file': ('rooms.csv', body.encode(), 'text/csv')})
    assert r.status_code == 200
    result = r.json()['data']
    assert result['imported'] == 1
    assert len(result['errors']) == 1
    assert result['errors'][0].startswith('Row 2')


def test_csv_import_with_no_valid_rows(client):
    body = 'name,building,type,capacity\nRoom 2,Main Building,Garage,10\n'
    r = client.post('/api/classrooms/import', files={'file': ('rooms.csv', body.encode(), 'text/csv')})
    assert r.status_code == 400


def _timetable(status='draft'):
    return {
        'name': 'CS Year 1',
        'academic_year': '2024-25',
        'semester': 1,
        'department': 'Computer Science',
        'year': 1,
        'status': status,
        'entries': [
            {'day': 'Monday', 'start_time': '09:00', 'end_time': '10:00', 'course_code': 'CS101',
             'course_name': 'Intro to Programming', 'teacher': 'Dr. Sarah Johnson', 'classroom': 'Room 101',
             'program': 'B.Tech CS', 'student_count': 60},
            {'day': 'Tuesday', 'start_time': '10:00', 'end_time': '11:30', 'course_code': 'MA101',
             'course_name': 'Calculus', 'session_type': 'Tutorial', 'teacher': 'Dr. Emily Rodriguez',
             'classroom': 'Room 102', 'program': 'B.Tech CS', 'student_count': 55},
        ],
    }


def test_timetable_projection(client):
    tid = client.post('/api/timetables', json=_timetable()).json()['data']['id']
    full = client.get(f'/api/timetables/{tid}').json()['data']
    assert len(full['entries']) == 2
    summary = client.get(f'/api/timetables/{tid}', params={'projection': 'summary'}).json()['data']
    assert 'entries' not in summary
    assert summary['name'] == 'CS Year 1'
    assert client.get(f'/api/timetables/{tid}', params={'projection': 'bogus'}).status_code == 400


def test_timetable_status_and_comments(client):
    tid = client.post('/api/timetables', json=_timetable()).json()['data']['id']
    r = client.patch(f'/api/timetables/{tid}/status', json={'status': 'published'})
    assert r.status_code == 200
    assert r.json()['data']['published_at'] is not None
    assert client.patch(f'/api/timetables/{tid}/status', json={'status': 'done'}).status_code == 400

    r = client.post(f'/api/timetables/{tid}/comments', json={'text': 'Looks good'})
    assert r.status_code == 201
    comments = client.get(f'/api/timetables/{tid}').json()['data']['comments']
    assert [c['text'] for c in comments] == ['Looks good']

    assert client.get('/api/timetables', params={'status': 'published'}).json()['total'] == 1
    assert client.get('/api/timetables', params={'status': 'draft'}).json()['total'] == 0

    assert client.delete(f'/api/timetables/{tid}').status_code == 200
    assert client.get(f'/api/timetables/{tid}').status_code == 404


def test_statistics(client, room_payload, teacher_payload):
    client.post('/api/classrooms', json=room_payload)
    room_payload.update(name='Physics Lab', type='Laboratory', capacity=25, status='Maintenance')
    client.post('/api/classrooms', json=room_payload)
    client.post('/api/teachers', json=teacher_payload)

    stats = client.get('/api/data/statistics').json()['data']
    assert stats['classrooms'] == {
        'active': 1, 'inactive': 1, 'total': 2, 'total_capacity': 85,
        'by_type': [{'key': 'Laboratory', 'count': 1}, {'key': 'Lecture Hall', 'count': 1}],
    }
    assert stats['teachers']['by_department'] == [{'key': 'Computer Science', 'count': 1}]
    assert stats['courses']['total'] == 0


def test_validate_readiness(client, room_payload, teacher_payload, course_payload):
    report = client.get('/api/data/validate').json()['data']
    assert report['overall']['ready'] is False

    client.post('/api/classrooms', json=room_payload)
    client.post('/api/teachers', json=teacher_payload)
    course_payload['prerequisites'] = []
    client.post('/api/courses', json=course_payload)
    report = client.get('/api/data/validate').json()['data']
    assert report['overall'] == {'ready': True, 'status': 'ready'}


def test_student_stats_counts_published_only(client):
    client.post('/api/timetables', json=_timetable('published'))
    client.post('/api/timetables', json=_timetable('draft'))
    stats = client.get('/api/dashboard/student-stats', params={'program': 'B.Tech CS'}).json()['data']
    assert stats['classes_per_week'] == 2
    assert stats['hours_per_week'] == 2.5
    assert stats['courses'] == 2
    assert stats['classes_per_day'] == {'Monday': 1, 'Tuesday': 1}


def test_dashboard_overview(client):
    client.post('/api/timetables', json=_timetable('published'))
    overview = client.get('/api/dashboard/overview').json()['data']
    assert overview['counts']['timetables'] == 1
    assert overview['status_distribution'] == [{'status': 'published', 'count': 1}]
    assert overview['recent_timetables'][0]['name'] == 'CS Year 1'


def _names(client, path, **params):
    return [r['name'] for r in client.get(path, params=params).json()['data']]


def test_list_filters(client, room_payload, teacher_payload, course_payload):
    client.post('/api/classrooms', json=room_payload)
    client.post('/api/classrooms', json=dict(room_payload, name='Physics Lab', building='Science Building',
                                             type='Laboratory', capacity=30, features=['WiFi']))
    assert _names(client, '/api/classrooms', building='Science Building') == ['Physics Lab']
    assert _names(client, '/api/classrooms', min_capacity=50) == ['Room 101']
    assert _names(client, '/api/classrooms', feature='AC') == ['Room 101']
    assert _names(client, '/api/classrooms', building='all') == ['Physics Lab', 'Room 101']

    client.post('/api/teachers', json=teacher_payload)
    assert _names(client, '/api/teachers', subject='Algorithms') == ['Dr. Sarah Johnson']
    assert _names(client, '/api/teachers', department='Mathematics') == []

    client.post('/api/courses', json=course_payload)
    assert _names(client, '/api/courses', semester=3, prerequisite='CS101') == ['Data Structures']
    assert _names(client, '/api/courses', semester=4) == []


def test_list_filters_reject_bad_parameters(client):
    assert client.get('/api/classrooms', params={'colour': 'red'}).status_code == 400
    r = client.get('/api/classrooms', params={'min_capacity': 'lots'})
    assert r.status_code == 400
    assert r.json()['detail'] == "filter 'min_capacity' must be a whole number"


def test_classroom_analytics(client, room_payload):
    client.post('/api/classrooms', json=room_payload)
    client.post('/api/classrooms', json=dict(room_payload, name='Room 102', floor='Ground Floor', capacity=40,
                                             features=['Projector']))
    client.post('/api/classrooms', json=dict(room_payload, name='Old Lab', type='Laboratory', capacity=10,
                                             status='Inactive'))

    data = client.get('/api/dashboard/analytics/classrooms').json()['data']
    assert data['summary'] == {'total_classrooms': 2, 'avg_capacity': 50.0, 'total_capacity': 100}
    assert data['by_type'] == [{'key': 'Lecture Hall', 'count': 2, 'avg_capacity': 50.0, 'total_capacity': 100}]
    buckets = {b['bucket']: b['count'] for b in data['capacity_distribution']}
    assert buckets == {'0-19': 0, '20-49': 1, '50-99': 1, '100-199': 0, '200-499': 0, '500+': 0}
    assert data['building_distribution'] == [
        {'building': 'Main Building', 'count': 2, 'floors': ['1st Floor', 'Ground Floor'], 'total_capacity': 100}]
    assert data['feature_utilization'] == [
        {'feature': 'Projector', 'count': 2, 'rooms': ['Room 101', 'Room 102']},
        {'feature': 'AC', 'count': 1, 'rooms': ['Room 101']},
    ]

    scoped = client.get('/api/dashboard/analytics/classrooms', params={'building': 'Science Building'}).json()
    assert scoped['data']['summary'] == {'total_classrooms': 0, 'avg_capacity': 0.0, 'total_capacity': 0}


def test_teacher_analytics_workload(client, teacher_payload):
    client.post('/api/teachers', json=teacher_payload)
    client.post('/api/teachers', json=dict(teacher_payload, name='Dr. Emily Rodriguez', email='emily@university.edu',
                                           department='Mathematics', designation='Lecturer', max_hours_per_week=16))
    client.post('/api/timetables', json=_timetable('published'))

    data = client.get('/api/dashboard/analytics/teachers').json()['data']
    assert data['summary'] == {'total_teachers': 2, 'avg_max_hours': 18.0, 'total_scheduled_hours': 2.5}
    assert [d['key'] for d in data['by_designation']] == ['Lecturer', 'Professor']
    assert data['workload_distribution'][0] == {
        'bucket': '0-9', 'count': 2,
        'teachers': [{'name': 'Dr. Emily Rodriguez', 'hours': 1.5}, {'name': 'Dr. Sarah Johnson', 'hours': 1.0}],
    }

    maths = client.get('/api/dashboard/analytics/teachers', params={'department': 'Mathematics'}).json()['data']
    assert maths['department_distribution'] == [
        {'department': 'Mathematics', 'count': 1, 'designations': ['Lecturer']}]


def test_course_analytics(client, course_payload):
    client.post('/api/courses', json=course_payload)
    client.post('/api/courses', json=dict(course_payload, name='Discrete Maths', code='MA201', has_lab=False,
                                          lab_hours=None, prerequisites=[], hours_per_week=3))

    data = client.get('/api/dashboard/analytics/courses').json()['data']
    assert data['summary'] == {'total_courses': 2, 'avg_hours_per_week': 3.5, 'total_hours': 9}
    assert data['semester_distribution'] == [{'semester': 3, 'count': 2, 'courses': [
        {'code': 'CS201', 'name': 'Data Structures'}, {'code': 'MA201', 'name': 'Discrete Maths'}]}]
    assert [(g['has_lab'], g['count']) for g in data['lab_requirements']] == [(False, 1), (True, 1)]


def test_timetable_analytics(client):
    client.post('/api/timetables', json=_timetable('published'))
    client.post('/api/timetables', json=_timetable('draft'))

    data = client.get('/api/dashboard/analytics/timetables').json()['data']
    assert data['summary'] == {'total_timetables': 2, 'total_entries': 4, 'total_hours': 5.0}
    assert data['by_status'][0] == {'status': 'draft', 'count': 1, 'avg_entries': 2.0, 'total_entries': 2,
                                    'total_hours': 2.5}
    assert data['department_distribution'] == [
        {'department': 'Computer Science', 'count': 2, 'semesters': [1], 'academic_years': ['2024-25']}]

    published = client.get('/api/dashboard/analytics/timetables', params={'status': 'published'}).json()['data']
    assert published['summary']['total_timetables'] == 1
    assert client.get('/api/dashboard/analytics/timetables', params={'status': 'done'}).status_code == 400
    assert client.get('/api/dashboard/analytics/rooms').status_code == 404
