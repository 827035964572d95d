"""
client/samples.py

Sample university data: used to seed the local store, to generate the seed
CSVs for the backend (scripts/generate_sample_data.py) and by the tests.
"""

import copy

WEEK_SLOTS = ['09:00-12:00', '14:00-17:00']


def _room_week(friday_until='16:00', saturday=True, **overrides):
    week = {day: list(WEEK_SLOTS) for day in ('Monday', 'Tuesday', 'Wednesday', 'Thursday')}
    week['Friday'] = ['09:00-12:00', f'14:00-{friday_until}'] if friday_until else ['09:00-12:00']
    week['Saturday'] = ['09:00-12:00'] if saturday else []
    week.update(overrides)
    return week


def _teacher_week(until='17:00'):
    week = {day: {'available': True, 'start_time': '09:00', 'end_time': until}
            for day in ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday')}
    week['Saturday'] = {'available': False, 'start_time': '09:00', 'end_time': '13:00'}
    week['Sunday'] = {'available': False, 'start_time': '09:00', 'end_time': '13:00'}
    return week


ROOMS = [
    {
        'id': 'R101', 'name': 'Room 101', 'building': 'Main Building', 'floor': '1st Floor',
        'type': 'Lecture Hall', 'capacity': 60,
        'features': ['Projector', 'Sound System', 'AC', 'WiFi'],
        'availability': _room_week(), 'status': 'Active',
    },
    {
        'id': 'R102', 'name': 'Room 102', 'building': 'Main Building', 'floor': '1st Floor',
        'type': 'Lecture Hall', 'capacity': 55,
        'features': ['Projector', 'AC', 'WiFi'],
        'availability': _room_week(saturday=False), 'status': 'Active',
    },
    {
        'id': 'L201', 'name': 'Computer Lab 1', 'building': 'Technology Building', 'floor': '2nd Floor',
        'type': 'Computer Lab', 'capacity': 30,
        'features': ['Computers', 'Projector', 'AC', 'WiFi', 'Sound System'],
        'availability': _room_week(friday_until=None, saturday=False), 'status': 'Active',
    },
    {
        'id': 'L202', 'name': 'Physics Lab', 'building': 'Science Building', 'floor': '2nd Floor',
        'type': 'Laboratory', 'capacity': 25,
        'features': ['Lab Equipment', 'Safety Equipment', 'AC', 'WiFi'],
        'availability': _room_week(Wednesday=['14:00-17:00']), 'status': 'Active',
    },
]

TEACHERS = [
    {
        'id': 'T001', 'name': 'Dr. Sarah Johnson', 'email': 'sarah.johnson@university.edu',
        'phone': '+1-555-0123', 'department': 'Computer Science', 'designation': 'Professor',
        'qualification': 'Ph.D. Computer Science', 'experience': '12 years',
        'subjects': ['Data Structures', 'Algorithms', 'Machine Learning'],
        'max_hours_per_week': 20, 'availability': _teacher_week(), 'priority': 'high', 'status': 'Active',
    },
    {
        'id': 'T002', 'name': 'Prof. Michael Chen', 'email': 'michael.chen@university.edu',
        'phone': '+1-555-0124', 'department': 'Computer Science', 'designation': 'Associate Professor',
        'qualification': 'Ph.D. Software Engineering', 'experience': '8 years',
        'subjects': ['Software Engineering', 'Database Systems', 'Web Development'],
        'max_hours_per_week': 18, 'availability': _teacher_week(), 'priority': 'high', 'status': 'Active',
    },
    {
        'id': 'T003', 'name': 'Dr. Emily Rodriguez', 'email': 'emily.rodriguez@university.edu',
        'phone': '+1-555-0125', 'department': 'Mathematics', 'designation': 'Assistant Professor',
        'qualification': 'Ph.D. Applied Mathematics', 'experience': '5 years',
        'subjects': ['Calculus', 'Linear Algebra', 'Statistics'],
        'max_hours_per_week': 16, 'availability': _teacher_week('15:00'), 'priority': 'medium',
        'status': 'Active',
    },
]

COURSES = [
    {
        'id': 'C001', 'name': 'Data Structures', 'code': 'CS201', 'program': 'Computer Science',
        'semester': 3, 'credits': 4, 'type': 'Theory', 'hours_per_week': 3, 'has_lab': True,
        'lab_hours': 2, 'prerequisites': ['CS101'], 'status': 'Active',
    },
    {
        'id': 'C002', 'name': 'Database Systems', 'code': 'CS202', 'program': 'Computer Science',
        'semester': 4, 'credits': 4, 'type': 'Theory', 'hours_per_week': 3, 'has_lab': True,
        'lab_hours': 2, 'prerequisites': ['CS201'], 'status': 'Active',
    },
    {
        'id': 'C003', 'name': 'Software Engineering', 'code': 'CS301', 'program': 'Computer Science',
        'semester': 5, 'credits': 3, 'type': 'Theory', 'hours_per_week': 3, 'has_lab': False,
        'lab_hours': None, 'prerequisites': ['CS202'], 'status': 'Active',
    },
    {
        'id': 'C004', 'name': 'Machine Learning', 'code': 'CS401', 'program': 'Computer Science',
        'semester': 7, 'credits': 3, 'type': 'Theory', 'hours_per_week': 3, 'has_lab': False,
        'lab_hours': None, 'prerequisites': ['CS201', 'MA201'], 'status': 'Active',
    },
    {
        'id': 'C005', 'name': 'Linear Algebra', 'code': 'MA201', 'program': 'Mathematics',
        'semester': 2, 'credits': 3, 'type': 'Theory', 'hours_per_week': 3, 'has_lab': False,
        'lab_hours': None, 'prerequisites': [], 'status': 'Active',
    },
    {
        'id': 'C006', 'name': 'Statistics', 'code': 'MA202', 'program': 'Mathematics',
        'semester': 3, 'credits': 3, 'type': 'Tutorial', 'hours_per_week': 2, 'has_lab': False,
        'lab_hours': None, 'prerequisites': [], 'status': 'Active',
    },
]


def _entry(day, time, code, course, session_type, teacher, room, program, students):
    start, end = time.split('-')
    return {
        'day': day, 'start_time': start, 'end_time': end, 'course_code': code, 'course_name': course,
        'session_type': session_type, 'teacher': teacher, 'classroom': room, 'program': program,
        'student_count': students,
    }


TIMETABLE_ENTRIES = [
    _entry('Monday', '09:00-10:00', 'CS201', 'Data Structures', 'Lecture', 'Dr. Sarah Johnson', 'R101',
           'Computer Science - Sem 3', 60),
    _entry('Monday', '10:00-11:00', 'CS202', 'Database Systems', 'Lecture', 'Prof. Michael Chen', 'R102',
           'Computer Science - Sem 4', 55),
    _entry('Monday', '11:30-13:30', 'CS201', 'Data Structures Lab', 'Lab', 'Dr. Sarah Johnson', 'L201',
           'Computer Science - Sem 3 (Batch A)', 20),
    _entry('Monday', '14:00-15:00', 'MA201', 'Linear Algebra', 'Lecture', 'Dr. Emily Rodriguez', 'R101',
           'Mathematics - Sem 2', 45),
    _entry('Tuesday', '09:00-10:00', 'CS301', 'Software Engineering', 'Lecture', 'Prof. Michael Chen', 'R101',
           'Computer Science - Sem 5', 50),
    _entry('Tuesday', '10:00-11:00', 'CS401', 'Machine Learning', 'Lecture', 'Dr. Sarah Johnson', 'R102',
           'Computer Science - Sem 7', 40),
    _entry('Wednesday', '09:00-10:00', 'MA202', 'Statistics', 'Tutorial', 'Dr. Emily Rodriguez', 'R102',
           'Mathematics - Sem 3', 35),
    _entry('Wednesday', '11:30-13:30', 'CS202', 'Database Lab', 'Lab', 'Prof. Michael Chen', 'L202',
           'Computer Science - Sem 4 (Batch B)', 18),
]

SAMPLES = {
    'classrooms': ROOMS,
    'teachers': TEACHERS,
    'courses': COURSES,
}


def sample_records(resource):
    """Fresh deep copy of the sample records of one resource."""
    return copy.deepcopy(SAMPLES[resource])


def sample_entries():
    return copy.deepcopy(TIMETABLE_ENTRIES)
