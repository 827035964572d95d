import pytest

from client.entities import ROOMS
from client.samples import sample_entries
from client.store import LocalStore
from client.views import ListView, filter_schedule, schedule_grid, slot_lookup, truncate


@pytest.fixture
def three_rooms(rooms):
    # two in Main Building, one in Science Building
    return [r for r in rooms if r['id'] != 'L201']


def test_distinct_buildings_scenario(three_rooms):
    store = LocalStore(ROOMS, three_rooms)
    view = ListView(store)
    assert view.distinct_count('building') == 2
    store.delete('L202')
    assert view.distinct_count('building') == 1


def test_distinct_count_tracks_every_mutation(rooms):
    store = LocalStore(ROOMS, rooms)
    view = ListView(store)

    def expected():
        return len({r['building'] for r in store.list()})

    assert view.distinct_count('building') == expected() == 3
    new_id = store.create({**rooms[0], 'id': None, 'building': 'Library Building'})
    assert view.distinct_count('building') == expected() == 4
    store.update(new_id, {**rooms[0], 'building': 'Main Building'})
    assert view.distinct_count('building') == expected() == 3
    store.delete('L201')
    assert view.distinct_count('building') == expected() == 2
    for r in store.list():
        store.delete(r['id'])
    assert view.distinct_count('building') == expected() == 0


def test_room_aggregates(rooms):
    view = ListView(LocalStore(ROOMS, rooms))
    assert view.count() == 4
    assert view.total('capacity') == 170
    assert view.count_containing('type', 'Lab') == 2
    assert view.count_where(lambda r: r['capacity'] >= 50) == 2
    assert view.distinct_values('building') == ['Main Building', 'Science Building', 'Technology Building']


def test_views_accept_plain_lists(rooms):
    assert ListView(rooms).count() == 4


def test_distinct_values_of_list_fields(rooms):
    view = ListView(rooms + [{**rooms[0], 'id': 'R900', 'features': []}])
    assert view.distinct_values('features') == [
        'AC', 'Computers', 'Lab Equipment', 'Projector', 'Safety Equipment', 'Sound System', 'WiFi']
    assert view.distinct_count('features') == 7


@pytest.mark.parametrize('values, shown, badge', [
    (['Projector', 'AC'], ['Projector', 'AC'], None),
    (['Projector', 'AC', 'WiFi'], ['Projector', 'AC', 'WiFi'], None),
    (['Computers', 'Projector', 'AC', 'WiFi', 'Sound System'], ['Computers', 'Projector', 'AC'], '+2 more'),
    ([], [], None),
])
def test_truncate(values, shown, badge):
    assert truncate(values) == (shown, badge)


def test_search_and_where(rooms):
    view = ListView(rooms)
    assert [r['id'] for r in view.search('science', ['name', 'building'])] == ['L202']
    assert [r['id'] for r in view.search('ROOM', ['name'])] == ['R101', 'R102']
    assert len(view.search('', ['name'])) == 4
    assert [r['id'] for r in view.where(type='Lecture Hall', capacity=55)] == ['R102']


def test_search_matches_list_fields(teachers):
    view = ListView(teachers)
    assert [t['id'] for t in view.search('linear', ['subjects'])] == ['T003']


def test_to_frame(rooms):
    df = ListView(rooms).to_frame(columns=['id', 'name', 'capacity'])
    assert list(df.columns) == ['id', 'name', 'capacity']
    assert df['capacity'].sum() == 170


def test_filter_schedule():
    entries = sample_entries()
    assert len(filter_schedule(entries)) == 8
    by_teacher = filter_schedule(entries, 'teacher', 'Dr. Sarah Johnson')
    assert {e['course_name'] for e in by_teacher} == {'Data Structures', 'Data Structures Lab', 'Machine Learning'}
    assert len(filter_schedule(entries, 'room', 'R101', day='Monday')) == 2
    assert [e['course_name'] for e in filter_schedule(entries, search='lab')] == [
        'Data Structures Lab', 'Database Lab']
    # a filter type without a selected entity shows everything
    assert len(filter_schedule(entries, 'program', None)) == 8
    with pytest.raises(ValueError):
        filter_schedule(entries, 'building', 'Main Building')


def test_slot_lookup():
    entries = sample_entries()
    assert slot_lookup(entries, 'Monday', '09:00-10:00')['course_name'] == 'Data Structures'
    assert slot_lookup(entries, 'Monday', '11:00-12:00')['course_name'] == 'Data Structures Lab'
    assert slot_lookup(entries, 'Friday', '09:00-10:00') is None


def test_schedule_grid():
    grid = schedule_grid(sample_entries(), ['Monday', 'Tuesday'], ['09:00-10:00', '12:00-13:00'])
    assert grid.loc['09:00-10:00', 'Tuesday'] == 'Software Engineering / Prof. Michael Chen / R101'
    assert grid.loc['12:00-13:00', 'Monday'] == ''
