"""
client/api.py

REST client for the timetable API (the pages' sync adapter).

Every JSON response is validated against the envelope models in
``backend.schemas``. A body that does not match raises ResponseSchemaError
instead of being guessed at, and HTTP errors raise ApiError / NotFoundError.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from backend import schemas

from .context import AppContext
from .entities import get_kind
from .errors import ApiError, NotFoundError, ResponseSchemaError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def _params(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Query parameters with blank and "all" filters dropped."""
    return {k: v for k, v in (filters or {}).items() if v not in (None, '', 'all')}


def error_from_response(r) -> ApiError:
    """Turn a FastAPI error body ({"detail": ...}) into an ApiError."""
    try:
        detail = r.json().get('detail')
    except (ValueError, AttributeError):
        detail = None
    details = None
    if isinstance(detail, str):
        message = detail
    elif isinstance(detail, list):
        # request validation errors
        message = 'Validation failed'
        details = [f"{'.'.join(str(p) for p in e.get('loc', [])[1:])}: {e.get('msg')}" for e in detail]
    elif isinstance(detail, dict):
        message = detail.get('message', f'HTTP {r.status_code}')
        details = detail.get('errors')
    else:
        message = f'HTTP {r.status_code}'
    if r.status_code == 404:
        return NotFoundError(message, details=details)
    return ApiError(message, status_code=r.status_code, details=details)


class ApiClient:
    """
    Thin wrapper over a requests-compatible session.

    ``session`` defaults to a ``requests.Session``; tests pass FastAPI's
    TestClient, which exposes the same ``request(method, url, ...)`` call.
    """

    def __init__(self, context: Optional[AppContext] = None, session=None):
        self.context = context or AppContext.from_config()
        self.session = session if session is not None else requests.Session()

    # ---------------- plumbing ----------------

    def _url(self, path: str) -> str:
        return f"{self.context.api_base.rstrip('/')}{path}"

    def _request(self, method: str, path: str, **kwargs):
        url = self._url(path)
        headers = {'Accept': 'application/json', **self.context.auth_headers()}
        logger.debug(f"{method} {url}")
        try:
            r = self.session.request(method, url, headers=headers, timeout=self.context.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise ApiError(f'Network error: {e}') from e
        if r.status_code >= 400:
            err = error_from_response(r)
            logger.warning(f"{method} {url} -> {r.status_code}: {err.message}")
            raise err
        return r

    def _call(self, method: str, path: str, envelope, **kwargs):
        r = self._request(method, path, **kwargs)
        try:
            body = r.json()
        except ValueError as e:
            raise ResponseSchemaError(f'{method} {path} did not return JSON', status_code=r.status_code) from e
        try:
            return envelope.model_validate(body)
        except ValidationError as e:
            raise ResponseSchemaError(f'Unexpected response shape from {method} {path}',
                                      status_code=r.status_code, details=e.errors()) from e

    @staticmethod
    def _record_schema(resource: str):
        return get_kind(resource).record_model

    # ---------------- generic collection calls ----------------

    def list(self, resource: str, filters: Optional[Dict[str, Any]] = None) -> List[Record]:
        out = self._call('GET', f'/api/{resource}', schemas.ListResponse[self._record_schema(resource)],
                         params=_params(filters))
        return [item.model_dump() for item in out.data]

    def get(self, resource: str, record_id: str) -> Record:
        out = self._call('GET', f'/api/{resource}/{record_id}', schemas.ItemResponse[self._record_schema(resource)])
        return out.data.model_dump()

    def create(self, resource: str, draft: Record) -> Record:
        out = self._call('POST', f'/api/{resource}', schemas.ItemResponse[self._record_schema(resource)],
                         json=draft)
        return out.data.model_dump()

    def update(self, resource: str, record_id: str, draft: Record) -> Record:
        out = self._call('PUT', f'/api/{resource}/{record_id}', schemas.ItemResponse[self._record_schema(resource)],
                         json=draft)
        return out.data.model_dump()

    def delete(self, resource: str, record_id: str) -> str:
        self._record_schema(resource)
        return self._call('DELETE', f'/api/{resource}/{record_id}', schemas.MessageResponse).message

    def import_csv(self, resource: str, filename: str, content: bytes) -> Dict[str, Any]:
        self._record_schema(resource)
        out = self._call('POST', f'/api/{resource}/import', schemas.ItemResponse[schemas.ImportResult],
                         files={'file': (filename, content, 'text/csv')})
        return out.data.model_dump()

    def export_csv(self, resource: str) -> bytes:
        self._record_schema(resource)
        return self._request('GET', f'/api/{resource}/export').content

    # ---------------- named reads ----------------

    def get_teachers(self, filters: Optional[Dict[str, Any]] = None) -> List[Record]:
        return self.list('teachers', filters)

    def get_classrooms(self, filters: Optional[Dict[str, Any]] = None) -> List[Record]:
        return self.list('classrooms', filters)

    def get_courses(self, filters: Optional[Dict[str, Any]] = None) -> List[Record]:
        return self.list('courses', filters)

    def get_timetables(self, filters: Optional[Dict[str, Any]] = None) -> List[Record]:
        out = self._call('GET', '/api/timetables', schemas.ListResponse[schemas.TimetableSummary],
                         params=_params(filters))
        return [t.model_dump(mode='json') for t in out.data]

    def get_timetable(self, timetable_id: str, projection: str = 'full') -> Record:
        model = schemas.TimetableOut if projection == 'full' else schemas.TimetableSummary
        out = self._call('GET', f'/api/timetables/{timetable_id}', schemas.ItemResponse[model],
                         params={'projection': projection})
        return out.data.model_dump(mode='json')

    def get_data_statistics(self) -> Dict[str, Any]:
        return self._call('GET', '/api/data/statistics', schemas.ItemResponse[Dict[str, Any]]).data

    def validate_data(self) -> Dict[str, Any]:
        return self._call('GET', '/api/data/validate', schemas.ItemResponse[Dict[str, Any]]).data

    def get_dashboard_overview(self) -> Dict[str, Any]:
        return self._call('GET', '/api/dashboard/overview', schemas.ItemResponse[Dict[str, Any]]).data

    def get_student_stats(self, program: Optional[str] = None) -> Dict[str, Any]:
        params = {'program': program} if program else {}
        return self._call('GET', '/api/dashboard/student-stats', schemas.ItemResponse[Dict[str, Any]],
                          params=params).data

    def get_analytics(self, section: str, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Breakdowns for 'teachers', 'classrooms', 'courses' or 'timetables'."""
        return self._call('GET', f'/api/dashboard/analytics/{section}', schemas.ItemResponse[Dict[str, Any]],
                          params=_params(filters)).data

    def health(self) -> Dict[str, Any]:
        """Probe /health; never raises, reports "up" or "down" with latency."""
        t0 = time.perf_counter()
        try:
            self._request('GET', '/health')
            status, error = 'up', None
        except ApiError as e:
            status, error = 'down', e.message
        latency_ms = round((time.perf_counter() - t0) * 1000.0, 2)
        return {'status': status, 'latency_ms': latency_ms, 'error': error}

    # ---------------- named mutators ----------------

    def create_classroom(self, draft: Record) -> Record:
        return self.create('classrooms', draft)

    def update_classroom(self, record_id: str, draft: Record) -> Record:
        return self.update('classrooms', record_id, draft)

    def delete_classroom(self, record_id: str) -> str:
        return self.delete('classrooms', record_id)

    def create_teacher(self, draft: Record) -> Record:
        return self.create('teachers', draft)

    def update_teacher(self, record_id: str, draft: Record) -> Record:
        return self.update('teachers', record_id, draft)

    def delete_teacher(self, record_id: str) -> str:
        return self.delete('teachers', record_id)

    def create_course(self, draft: Record) -> Record:
        return self.create('courses', draft)

    def update_course(self, record_id: str, draft: Record) -> Record:
        return self.update('courses', record_id, draft)

    def delete_course(self, record_id: str) -> str:
        return self.delete('courses', record_id)

    # ---------------- timetables ----------------

    def create_timetable(self, draft: Record) -> Record:
        out = self._call('POST', '/api/timetables', schemas.ItemResponse[schemas.TimetableOut], json=draft)
        return out.data.model_dump(mode='json')

    def update_timetable_status(self, timetable_id: str, status: str) -> Record:
        out = self._call('PATCH', f'/api/timetables/{timetable_id}/status',
                         schemas.ItemResponse[schemas.TimetableSummary], json={'status': status})
        return out.data.model_dump(mode='json')

    def add_timetable_comment(self, timetable_id: str, text: str) -> Record:
        out = self._call('POST', f'/api/timetables/{timetable_id}/comments',
                         schemas.ItemResponse[schemas.CommentOut], json={'text': text})
        return out.data.model_dump(mode='json')

    def delete_timetable(self, timetable_id: str) -> str:
        return self._call('DELETE', f'/api/timetables/{timetable_id}', schemas.MessageResponse).message
