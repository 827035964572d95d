import subprocess, sys, time, webbrowser
from pathlib import Path

ROOT = Path(__file__).parent
SEED_DIR = ROOT / 'data'


def ensure_csvs():
    print('Regenerating sample CSVs (classrooms, teachers, courses, timetable)...')
    subprocess.check_call([sys.executable, '-m', 'scripts.generate_sample_data', '--out', str(SEED_DIR),
                           '--extra', '12', '--seed', '42'], cwd=ROOT)


def populate_db():
    print('Populating DB from CSV...')
    subprocess.check_call([sys.executable, '-c',
                           f'import backend.init_db as i; i.populate_from_csv({str(SEED_DIR)!r})'], cwd=ROOT)


def start_backend():
    print('Starting backend (uvicorn) on port 8000...')
    return subprocess.Popen([sys.executable, '-m', 'uvicorn', 'backend.main:app', '--host', '0.0.0.0',
                             '--port', '8000'], cwd=ROOT)


def start_admin():
    print('Starting streamlit admin on port 8501...')
    return subprocess.Popen([sys.executable, '-m', 'streamlit', 'run', 'streamlit_admin/admin.py',
                             '--server.port', '8501'], cwd=ROOT)


def start_viewer():
    print('Starting streamlit timetable viewer on port 8502...')
    return subprocess.Popen([sys.executable, '-m', 'streamlit', 'run', 'streamlit_user/user.py',
                             '--server.port', '8502'], cwd=ROOT)


def main():
    ensure_csvs()
    populate_db()
    procs = []
    try:
        procs.append(start_backend())
        procs.append(start_admin())
        procs.append(start_viewer())
        print('All services launched.')
        # Give dev server a moment to start
        time.sleep(2)
        webbrowser.open('http://localhost:8501')
        print('Open http://localhost:8501 (Admin) and http://localhost:8502 (Timetable viewer).')
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print('Stopping services...')
    finally:
        for p in procs:
            p.terminate()


if __name__ == '__main__':
    main()
