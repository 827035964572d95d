import logging
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Depends, HTTPException, UploadFile, File, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import schemas, crud, csv_io
from .config import get_app_config
from .database import SessionLocal
from .init_db import create_all, populate_from_csv

logger = logging.getLogger(__name__)

config = get_app_config()

app = FastAPI(title='Timetable Admin API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config['cors_origins'],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Database dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@app.on_event('startup')
def startup_event():
    create_all()
    if config['seed_dir']:
        populate_from_csv(config['seed_dir'])


@app.get('/health')
def health():
    return {'status': 'ok'}


# ---------------- classrooms / teachers / courses ----------------

def register_resource(resource: str):
    """Mount list/create/read/update/delete plus CSV import/export for one entity type."""
    model, in_schema, out_schema = crud.RESOURCES[resource]
    label = resource[:-1].capitalize()
    base = f'/api/{resource}'

    def not_found():
        return HTTPException(status_code=404, detail=f'{label} not found')

    def conflict(db, e):
        db.rollback()
        logger.warning(f"Integrity error on {resource}: {e.orig}")
        return HTTPException(status_code=409, detail=f'{label} conflicts with an existing record')

    @app.get(f'{base}/export', name=f'export_{resource}')
    def export_records(db: Session = Depends(get_db)):
        body = csv_io.write_csv(resource, crud.list_records(db, model))
        return Response(content=body, media_type='text/csv',
                        headers={'Content-Disposition': f'attachment; filename="{resource}.csv"'})

    @app.post(f'{base}/import', response_model=schemas.ItemResponse[schemas.ImportResult],
              name=f'import_{resource}')
    async def import_records(file: UploadFile = File(...), db: Session = Depends(get_db)):
        try:
            text = (await file.read()).decode('utf-8-sig')
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail='CSV file must be UTF-8 encoded')
        payloads, errors = csv_io.read_csv(resource, text)
        if errors and not payloads:
            raise HTTPException(status_code=400, detail={'message': 'No valid records found', 'errors': errors})
        imported = 0
        for payload in payloads:
            try:
                crud.create_record(db, model, payload)
                imported += 1
            except IntegrityError as e:
                db.rollback()
                errors.append(f"Duplicate record skipped: {payload.get('code') or payload.get('name')} ({e.orig})")
        logger.info(f"Imported {imported} {resource}, {len(errors)} rows rejected")
        return {'data': {'imported': imported, 'errors': errors},
                'message': f'Imported {imported} {resource}'}

    @app.get(base, response_model=schemas.ListResponse[out_schema], name=f'list_{resource}')
    def list_records(request: Request, db: Session = Depends(get_db)):
        filters = {k: v for k, v in request.query_params.items() if v not in ('', 'all')}
        try:
            records = crud.list_records(db, model, filters)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {'data': [out_schema.model_validate(r) for r in records], 'total': len(records)}

    @app.post(base, status_code=201, response_model=schemas.ItemResponse[out_schema], name=f'create_{resource}')
    def create_record(payload: in_schema, db: Session = Depends(get_db)):
        try:
            record = crud.create_record(db, model, payload.model_dump())
        except IntegrityError as e:
            raise conflict(db, e)
        return {'data': out_schema.model_validate(record), 'message': f'{label} created successfully'}

    @app.get(base + '/{record_id}', response_model=schemas.ItemResponse[out_schema], name=f'get_{resource}')
    def get_record(record_id: str, db: Session = Depends(get_db)):
        record = crud.get_record(db, model, record_id)
        if not record:
            raise not_found()
        return {'data': out_schema.model_validate(record)}

    @app.put(base + '/{record_id}', response_model=schemas.ItemResponse[out_schema], name=f'update_{resource}')
    def update_record(record_id: str, payload: in_schema, db: Session = Depends(get_db)):
        try:
            record = crud.update_record(db, model, record_id, payload.model_dump())
        except IntegrityError as e:
            raise conflict(db, e)
        if not record:
            raise not_found()
        return {'data': out_schema.model_validate(record), 'message': f'{label} updated successfully'}

    @app.delete(base + '/{record_id}', response_model=schemas.MessageResponse, name=f'delete_{resource}')
    def delete_record(record_id: str, db: Session = Depends(get_db)):
        if not crud.delete_record(db, model, record_id):
            raise not_found()
        return {'message': f'{label} deleted successfully'}


for _resource in crud.RESOURCES:
    register_resource(_resource)


# ---------------- timetables ----------------

@app.get('/api/timetables', response_model=schemas.ListResponse[schemas.TimetableSummary])
def timetables_list(status: Optional[str] = None, department: Optional[str] = None,
                    academic_year: Optional[str] = None, semester: Optional[int] = None,
                    db: Session = Depends(get_db)):
    rows = crud.list_timetables(db, status, department, academic_year, semester)
    return {'data': [schemas.TimetableSummary.model_validate(t) for t in rows], 'total': len(rows)}


@app.post('/api/timetables', status_code=201, response_model=schemas.ItemResponse[schemas.TimetableOut])
def timetable_create(payload: schemas.TimetableIn, db: Session = Depends(get_db)):
    t = crud.create_timetable(db, payload)
    return {'data': schemas.TimetableOut.model_validate(t), 'message': 'Timetable created successfully'}


@app.get('/api/timetables/{timetable_id}', response_model=schemas.ItemResponse[Dict[str, Any]])
def timetable_detail(timetable_id: str, projection: str = 'full', db: Session = Depends(get_db)):
    t = crud.get_timetable(db, timetable_id)
    if not t:
        raise HTTPException(status_code=404, detail='Timetable not found')
    if projection == 'summary':
        out = schemas.TimetableSummary.model_validate(t)
    elif projection == 'full':
        out = schemas.TimetableOut.model_validate(t)
    else:
        raise HTTPException(status_code=400, detail="projection must be 'full' or 'summary'")
    return {'data': schemas.as_dict(out)}


@app.patch('/api/timetables/{timetable_id}/status', response_model=schemas.ItemResponse[schemas.TimetableSummary])
def timetable_status(timetable_id: str, payload: schemas.StatusUpdate, db: Session = Depends(get_db)):
    if payload.status not in schemas.TIMETABLE_STATUSES:
        raise HTTPException(status_code=400,
                            detail=f"Status must be one of: {', '.join(schemas.TIMETABLE_STATUSES)}")
    t = crud.set_timetable_status(db, timetable_id, payload.status)
    if not t:
        raise HTTPException(status_code=404, detail='Timetable not found')
    return {'data': schemas.TimetableSummary.model_validate(t),
            'message': f'Timetable status updated to {payload.status}'}


@app.post('/api/timetables/{timetable_id}/comments', status_code=201,
          response_model=schemas.ItemResponse[schemas.CommentOut])
def timetable_comment(timetable_id: str, payload: schemas.CommentIn, db: Session = Depends(get_db)):
    c = crud.add_timetable_comment(db, timetable_id, payload.text)
    if not c:
        raise HTTPException(status_code=404, detail='Timetable not found')
    return {'data': schemas.CommentOut.model_validate(c), 'message': 'Comment added'}


@app.delete('/api/timetables/{timetable_id}', response_model=schemas.MessageResponse)
def timetable_delete(timetable_id: str, db: Session = Depends(get_db)):
    if not crud.delete_timetable(db, timetable_id):
        raise HTTPException(status_code=404, detail='Timetable not found')
    return {'message': 'Timetable deleted successfully'}


# ---------------- statistics & dashboards ----------------

@app.get('/api/data/statistics', response_model=schemas.ItemResponse[Dict[str, Any]])
def data_statistics(db: Session = Depends(get_db)):
    return {'data': crud.data_statistics(db)}


@app.get('/api/data/validate', response_model=schemas.ItemResponse[Dict[str, Any]])
def data_validate(db: Session = Depends(get_db)):
    return {'data': crud.validate_data(db)}


@app.get('/api/dashboard/overview', response_model=schemas.ItemResponse[Dict[str, Any]])
def dashboard_overview(db: Session = Depends(get_db)):
    return {'data': crud.dashboard_overview(db)}


@app.get('/api/dashboard/student-stats', response_model=schemas.ItemResponse[Dict[str, Any]])
def dashboard_student_stats(program: Optional[str] = None, db: Session = Depends(get_db)):
    return {'data': crud.student_stats(db, program)}


@app.get('/api/dashboard/analytics/{section}', response_model=schemas.ItemResponse[Dict[str, Any]])
def dashboard_analytics(section: str, request: Request, db: Session = Depends(get_db)):
    if section not in crud.ANALYTICS:
        raise HTTPException(status_code=404, detail=f"Unknown analytics section '{section}'")
    build, filter_name = crud.ANALYTICS[section]
    value = request.query_params.get(filter_name) or None
    if section == 'timetables' and value and value not in schemas.TIMETABLE_STATUSES:
        raise HTTPException(status_code=400,
                            detail=f"Status must be one of: {', '.join(schemas.TIMETABLE_STATUSES)}")
    return {'data': build(db, value)}


if __name__ == '__main__':
    logging.basicConfig(level=config['log_level'],
                        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    uvicorn.run('backend.main:app', host='0.0.0.0', port=8000, reload=True)
