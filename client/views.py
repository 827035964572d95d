"""
client/views.py

Read-only reductions and filters over a store snapshot, recomputed on
every call (counts, totals, distinct values, search, schedule grid lookup).
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from backend.schemas import parse_range, parse_time

Record = Dict[str, Any]

# viewer filter types -> schedule entry field
ENTITY_FIELDS = {
    'teacher': 'teacher',
    'program': 'program',
    'room': 'classroom',
}
SCHEDULE_SEARCH_FIELDS = ('course_name', 'course_code', 'teacher', 'program', 'classroom')


def _text(value) -> str:
    if value is None:
        return ''
    if isinstance(value, (list, tuple)):
        return ' '.join(map(str, value))
    return str(value)


def truncate(values: Iterable[Any], limit: int = 3) -> Tuple[List[Any], Optional[str]]:
    """First ``limit`` values plus a "+N more" badge (None when nothing is hidden)."""
    values = list(values or [])
    hidden = len(values) - limit
    return values[:limit], (f"+{hidden} more" if hidden > 0 else None)


class ListView:
    """Aggregates over the rows of a store (or any list of dicts)."""

    def __init__(self, source):
        # source is a store (anything with .list()) or a plain list of records
        self.source = source

    @property
    def rows(self) -> List[Record]:
        if hasattr(self.source, 'list'):
            return self.source.list()
        return list(self.source)

    def count(self) -> int:
        return len(self.rows)

    def total(self, field: str) -> int:
        return sum(r.get(field) or 0 for r in self.rows)

    def distinct_values(self, field: str) -> List[Any]:
        """Sorted distinct values; list-valued fields (features, subjects) contribute each item."""
        values = set()
        for r in self.rows:
            value = r.get(field)
            for v in (value if isinstance(value, (list, tuple)) else [value]):
                if v not in (None, ''):
                    values.add(v)
        return sorted(values)

    def distinct_count(self, field: str) -> int:
        return len(self.distinct_values(field))

    def count_where(self, predicate: Callable[[Record], bool]) -> int:
        return sum(1 for r in self.rows if predicate(r))

    def count_containing(self, field: str, text: str) -> int:
        needle = text.lower()
        return self.count_where(lambda r: needle in _text(r.get(field)).lower())

    def search(self, text: str, fields: Iterable[str]) -> List[Record]:
        """Case-insensitive substring match on any of ``fields``; blank text matches all."""
        rows = self.rows
        needle = (text or '').strip().lower()
        if not needle:
            return rows
        fields = list(fields)
        return [r for r in rows if any(needle in _text(r.get(f)).lower() for f in fields)]

    def where(self, **equals) -> List[Record]:
        return [r for r in self.rows if all(r.get(k) == v for k, v in equals.items())]

    def to_frame(self, columns: Optional[List[str]] = None, rows: Optional[List[Record]] = None) -> pd.DataFrame:
        rows = self.rows if rows is None else rows
        df = pd.DataFrame(rows)
        if columns:
            df = df.reindex(columns=columns)
        return df


def time_range(entry: Record) -> str:
    return f"{entry['start_time']}-{entry['end_time']}"


def filter_schedule(entries: Iterable[Record], entity_type: str = 'all', entity: Optional[str] = None,
                    day: str = 'all', search: str = '') -> List[Record]:
    """Viewer filter: by teacher/program/room, then day, then free-text search."""
    filtered = list(entries)
    if entity_type != 'all' and entity:
        try:
            field = ENTITY_FIELDS[entity_type]
        except KeyError:
            raise ValueError(f"unknown filter type '{entity_type}'") from None
        filtered = [e for e in filtered if e.get(field) == entity]
    if day and day != 'all':
        filtered = [e for e in filtered if e.get('day') == day]
    needle = (search or '').strip().lower()
    if needle:
        filtered = [e for e in filtered
                    if any(needle in _text(e.get(f)).lower() for f in SCHEDULE_SEARCH_FIELDS)]
    return filtered


def slot_lookup(entries: Iterable[Record], day: str, slot: str) -> Optional[Record]:
    """The entry shown in the weekly grid cell (day, 'HH:MM-HH:MM'): the first class starting inside the slot."""
    start, end = parse_range(slot)
    for e in entries:
        if e.get('day') == day and start <= parse_time(e['start_time']) < end:
            return e
    return None


def schedule_grid(entries: Iterable[Record], days: List[str], slots: List[str]) -> pd.DataFrame:
    """Weekly grid (slots x days) of 'course / teacher / room' cell labels."""
    entries = list(entries)
    grid = {}
    for day in days:
        column = []
        for slot in slots:
            e = slot_lookup(entries, day, slot)
            column.append(f"{e['course_name']} / {e['teacher']} / {e['classroom']}" if e else '')
        grid[day] = column
    return pd.DataFrame(grid, index=slots)
