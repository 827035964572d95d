"""
streamlit_admin/admin.py

Admin dashboard for the timetable data:
- Classrooms, teachers and courses: list, search, add / edit / delete
- CSV import and export per resource
- Statistics: counts, breakdown charts and the data readiness report

Every page works on a RemoteStore (snapshot of the API collection) and a
FormBuffer (the add/edit draft), both kept in st.session_state.
"""

import logging

import pandas as pd
import plotly.express as px
import streamlit as st

from backend.schemas import COURSE_STATUSES, COURSE_TYPES, DAYS, PRIORITIES, ROOM_DAYS, ROOM_FEATURES, \
    ROOM_STATUSES, ROOM_TYPES, SEMESTERS, TEACHER_STATUSES
from client.api import ApiClient
from client.config import get_client_config
from client.context import AppContext
from client.entities import COURSES, KINDS, ROOM_TIME_SLOTS, ROOMS, TEACHERS
from client.errors import ApiError, FormValidationError
from client.form import FormBuffer
from client.store import RemoteStore
from client.views import ListView, truncate

config = get_client_config()
logging.basicConfig(level=config["log_level"], format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

st.set_page_config(page_title="Timetable Admin", layout="wide")
# Lightweight aesthetic theme for Streamlit
st.markdown(
    """
    <style>
      .block-container {padding-top: 1.2rem; padding-bottom: 2rem;}
      .stButton>button {border-radius: 10px; padding: 6px 14px}
      .stMetric {border: 1px solid #d0d7e2; border-radius: 12px; padding: 10px}
      .stDataFrame, .stTable {border-radius: 12px}
      .stAlert {border-radius: 12px}
      .badge {background: #e2e8f0; border-radius: 8px; padding: 1px 6px; font-size: .8rem}
    </style>
    """,
    unsafe_allow_html=True,
)
st.title("🗓️ Timetable Admin")

BUILDINGS = ["Main Building", "Technology Building", "Science Building", "Engineering Building", "Library Building"]
FLOORS = ["Ground Floor", "1st Floor", "2nd Floor", "3rd Floor", "4th Floor"]
DEPARTMENTS = ["Computer Science", "Mathematics", "Physics", "Chemistry", "Biology", "Engineering"]
DESIGNATIONS = ["Professor", "Associate Professor", "Assistant Professor", "Lecturer", "Teaching Assistant"]

# ---------------- Sidebar / Controls ----------------
if "context" not in st.session_state:
    st.session_state["context"] = AppContext.from_config(config)
ctx = st.session_state["context"]

ctx.api_base = st.sidebar.text_input("API Base URL", value=ctx.api_base)
ctx.dark_mode = st.sidebar.toggle("Dark mode", value=ctx.dark_mode)
if ctx.dark_mode:
    st.markdown(ctx.page_css(), unsafe_allow_html=True)
st.sidebar.caption(ctx.session_caption())
page = st.sidebar.radio("Page", ["Classrooms", "Teachers", "Courses", "Statistics"])
st.sidebar.markdown("---")
refresh_btn = st.sidebar.button("🔄 Refresh data")


# ---------------- session state helpers ----------------
def get_api() -> ApiClient:
    key = f"api::{ctx.api_base}"
    if key not in st.session_state:
        st.session_state[key] = ApiClient(ctx)
    return st.session_state[key]


def get_store(resource: str) -> RemoteStore:
    key = f"store::{ctx.api_base}::{resource}"
    if key not in st.session_state:
        store = RemoteStore(KINDS[resource], get_api())
        store.refresh()
        st.session_state[key] = store
    return st.session_state[key]


def get_form(resource: str) -> FormBuffer:
    key = f"form::{resource}"
    if key not in st.session_state:
        st.session_state[key] = FormBuffer(KINDS[resource])
    return st.session_state[key]


def show_load_error(store: RemoteStore) -> None:
    """Page-level banner with a retry button for a failed refresh."""
    if store.error:
        st.error(store.error)
        if st.button("Retry", key=f"retry_{store.kind.resource}"):
            store.refresh()
            st.rerun()


def show_api_error(e: ApiError) -> None:
    st.error(f"{e.message}" + (f" (HTTP {e.status_code})" if e.status_code else ""))
    if e.details:
        st.write(e.details)


def sync_set(form: FormBuffer, field: str, selected) -> None:
    """Bring a multi-select field in line with the widget selection, one toggle per change."""
    current = list(form.data[field])
    for value in current:
        if value not in selected:
            form.toggle(field, value)
    for value in selected:
        if value not in current:
            form.toggle(field, value)


def commit_form(form: FormBuffer, store: RemoteStore) -> None:
    try:
        with st.spinner("Saving..."):
            record_id = form.commit(store)
    except FormValidationError as e:
        for field, msg in e.errors.items():
            st.error(f"{field}: {msg}")
        return
    except ApiError as e:
        show_api_error(e)
        return
    st.success(f"{form.kind.label} {record_id} saved")
    st.rerun()


def delete_record(store: RemoteStore, record: dict) -> None:
    try:
        store.delete(record["id"])
    except ApiError as e:
        show_api_error(e)
        return
    st.success(f"Deleted {record['name']}")
    st.rerun()


def select_field(form: FormBuffer, field: str, label: str, options):
    """Selectbox for one draft field; an edited record's off-list value stays selected."""
    options = form.choices(field, options)
    current = form.data[field]
    return st.selectbox(label, options, index=options.index(current) if current in options else 0)


def record_rows(store: RemoteStore, form: FormBuffer, rows, render_row) -> None:
    """Rows with Edit / Delete buttons; ``render_row`` fills the leading columns."""
    if not rows:
        st.info(f"No {store.kind.resource} to show.")
        return
    for r in rows:
        cols = st.columns([2.2, 1.4, 1.4, 2.4, 0.6, 0.6])
        render_row(cols, r)
        if cols[4].button("Edit", key=f"edit_{r['id']}"):
            form.open_for_edit(r)
            st.rerun()
        if cols[5].button("Delete", key=f"del_{r['id']}"):
            delete_record(store, r)


def csv_tools(resource: str, store: RemoteStore) -> None:
    api = get_api()
    with st.expander(f"📤 Import / export {resource} CSV"):
        c1, c2 = st.columns(2)
        with c1:
            try:
                data = api.export_csv(resource)
                st.download_button(f"Download {resource}.csv", data=data, file_name=f"{resource}.csv",
                                   mime="text/csv")
            except ApiError as e:
                st.caption(f"Export unavailable: {e.message}")
        with c2:
            upload = st.file_uploader(f"{resource}.csv", type=["csv"], key=f"upload_{resource}")
            if upload is not None and st.button("Import", key=f"import_{resource}"):
                try:
                    result = api.import_csv(resource, upload.name, upload.getvalue())
                except ApiError as e:
                    show_api_error(e)
                else:
                    st.success(f"Imported {result['imported']} {resource}")
                    for err in result["errors"]:
                        st.warning(err)
                    store.refresh()


# ---------------- Classrooms ----------------
def classrooms_page():
    store = get_store(ROOMS.resource)
    form = get_form(ROOMS.resource)
    view = ListView(store)
    show_load_error(store)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total rooms", view.count())
    c2.metric("Total capacity", view.total("capacity"))
    c3.metric("Buildings", view.distinct_count("building"))
    c4.metric("Labs", view.count_containing("type", "Lab"))

    st.markdown("---")
    left, right = st.columns([2.6, 1.4])
    with left:
        query = st.text_input("Search rooms", placeholder="name, building or type")
        rows = view.search(query, ROOMS.search_fields)

        def render(cols, r):
            cols[0].markdown(f"**{r['name']}**  \n{r['id']}")
            cols[1].write(f"{r['building']}  \n{r['floor']}")
            cols[2].write(f"{r['type']}  \n{r['capacity']} seats · {r['status']}")
            shown, badge = truncate(r["features"])
            cols[3].markdown(", ".join(shown) + (f" <span class='badge'>{badge}</span>" if badge else ""),
                             unsafe_allow_html=True)

        record_rows(store, form, rows, render)
        csv_tools(ROOMS.resource, store)

    with right:
        if not form.is_open:
            if st.button("➕ Add classroom"):
                form.open_for_create()
                st.rerun()
            return
        st.subheader("Edit classroom" if form.is_edit else "Add classroom")
        d = form.data
        with st.form("room_form"):
            name = st.text_input("Name", value=d["name"])
            building = select_field(form, "building", "Building", BUILDINGS)
            floor = select_field(form, "floor", "Floor", FLOORS)
            room_type = select_field(form, "type", "Type", ROOM_TYPES)
            capacity = st.text_input("Capacity", value="" if d["capacity"] is None else str(d["capacity"]))
            status = select_field(form, "status", "Status", ROOM_STATUSES)
            features = st.multiselect("Features", ROOM_FEATURES, default=d["features"])
            slots = {}
            for day in ROOM_DAYS:
                current = d["availability"].get(day, [])
                options = sorted(set(ROOM_TIME_SLOTS) | set(current))
                slots[day] = st.multiselect(day, options, default=current, key=f"slots_{day}")
            save = st.form_submit_button("Save")
            cancel = st.form_submit_button("Cancel")
        if cancel:
            form.cancel()
            st.rerun()
        if save:
            try:
                form.set_field("name", name)
                form.set_field("building", building)
                form.set_field("floor", floor)
                form.set_field("type", room_type)
                form.set_field("capacity", capacity)
                form.set_field("status", status)
                sync_set(form, "features", features)
                for day, selected in slots.items():
                    current = form.data["availability"].get(day, [])
                    for slot in set(current) ^ set(selected):
                        form.toggle_slot(day, slot)
            except FormValidationError as e:
                for field, msg in e.errors.items():
                    st.error(f"{field}: {msg}")
            else:
                commit_form(form, store)


# ---------------- Teachers ----------------
def teachers_page():
    store = get_store(TEACHERS.resource)
    form = get_form(TEACHERS.resource)
    view = ListView(store)
    show_load_error(store)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total teachers", view.count())
    c2.metric("Active", view.count_where(lambda t: t["status"] == "Active"))
    c3.metric("Departments", view.distinct_count("department"))
    c4.metric("High priority", len(view.where(priority="high")))

    st.markdown("---")
    left, right = st.columns([2.6, 1.4])
    with left:
        query = st.text_input("Search teachers", placeholder="name, email or department")
        rows = view.search(query, TEACHERS.search_fields)

        def render(cols, t):
            cols[0].markdown(f"**{t['name']}**  \n{t['designation']}")
            cols[1].write(f"{t['department']}  \n{t['email']}")
            cols[2].write(f"{t['max_hours_per_week']} h/week  \npriority: {t['priority']}")
            shown, badge = truncate(t["subjects"])
            cols[3].markdown(", ".join(shown) + (f" <span class='badge'>{badge}</span>" if badge else ""),
                             unsafe_allow_html=True)

        record_rows(store, form, rows, render)
        csv_tools(TEACHERS.resource, store)

    with right:
        if not form.is_open:
            if st.button("➕ Add teacher"):
                form.open_for_create()
                st.rerun()
            return
        st.subheader("Edit teacher" if form.is_edit else "Add teacher")
        d = form.data
        with st.form("teacher_form"):
            values = {
                "name": st.text_input("Name", value=d["name"]),
                "email": st.text_input("Email", value=d["email"]),
                "phone": st.text_input("Phone", value=d["phone"]),
                "department": select_field(form, "department", "Department", DEPARTMENTS),
                "designation": select_field(form, "designation", "Designation", DESIGNATIONS),
                "qualification": st.text_input("Qualification", value=d["qualification"]),
                "experience": st.text_input("Experience", value=d["experience"]),
                "max_hours_per_week": st.text_input("Max hours per week", value=str(d["max_hours_per_week"] or "")),
                "priority": select_field(form, "priority", "Priority", PRIORITIES),
                "status": select_field(form, "status", "Status", TEACHER_STATUSES),
            }
            subjects = st.text_input("Subjects (comma separated)", value=", ".join(d["subjects"]))
            hours = {}
            for day in DAYS:
                day_data = d["availability"].get(day) or {}
                c_av, c_start, c_end = st.columns([1, 1, 1])
                hours[day] = {
                    "available": c_av.checkbox(day, value=bool(day_data.get("available")), key=f"av_{day}"),
                    "start_time": c_start.text_input("From", value=day_data.get("start_time", "09:00"),
                                                     key=f"from_{day}"),
                    "end_time": c_end.text_input("To", value=day_data.get("end_time", "17:00"), key=f"to_{day}"),
                }
            save = st.form_submit_button("Save")
            cancel = st.form_submit_button("Cancel")
        if cancel:
            form.cancel()
            st.rerun()
        if save:
            try:
                for field, value in values.items():
                    form.set_field(field, value)
                sync_set(form, "subjects", [s.strip() for s in subjects.split(",") if s.strip()])
                for day, day_values in hours.items():
                    for field, value in day_values.items():
                        form.set_availability(day, field, value)
            except FormValidationError as e:
                for field, msg in e.errors.items():
                    st.error(f"{field}: {msg}")
            else:
                commit_form(form, store)


# ---------------- Courses ----------------
def courses_page():
    store = get_store(COURSES.resource)
    form = get_form(COURSES.resource)
    view = ListView(store)
    show_load_error(store)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total courses", view.count())
    c2.metric("Programs", view.distinct_count("program"))
    c3.metric("Total credits", view.total("credits"))
    c4.metric("With lab", view.count_where(lambda c: c["has_lab"]))

    st.markdown("---")
    left, right = st.columns([2.6, 1.4])
    with left:
        query = st.text_input("Search courses", placeholder="name, code or program")
        rows = view.search(query, COURSES.search_fields)

        def render(cols, c):
            cols[0].markdown(f"**{c['name']}**  \n{c['code']}")
            cols[1].write(f"{c['program']}  \nSemester {c['semester']}")
            lab = f" + {c['lab_hours']} h lab" if c["has_lab"] else ""
            cols[2].write(f"{c['type']} · {c['credits']} credits  \n{c['hours_per_week']} h/week{lab}")
            shown, badge = truncate(c["prerequisites"])
            cols[3].markdown(("Requires " + ", ".join(shown) if shown else "No prerequisites")
                             + (f" <span class='badge'>{badge}</span>" if badge else ""),
                             unsafe_allow_html=True)

        record_rows(store, form, rows, render)
        csv_tools(COURSES.resource, store)

    with right:
        if not form.is_open:
            if st.button("➕ Add course"):
                form.open_for_create()
                st.rerun()
            return
        st.subheader("Edit course" if form.is_edit else "Add course")
        d = form.data
        known_codes = sorted({c["code"] for c in store.list()} | set(d["prerequisites"]))
        with st.form("course_form"):
            values = {
                "name": st.text_input("Name", value=d["name"]),
                "code": st.text_input("Code", value=d["code"]),
                "program": st.text_input("Program", value=d["program"]),
                "semester": select_field(form, "semester", "Semester", SEMESTERS),
                "credits": st.text_input("Credits", value="" if d["credits"] is None else str(d["credits"])),
                "type": select_field(form, "type", "Type", COURSE_TYPES),
                "hours_per_week": st.text_input("Hours per week",
                                                value="" if d["hours_per_week"] is None else str(d["hours_per_week"])),
                "has_lab": st.checkbox("Has lab", value=d["has_lab"]),
                "lab_hours": st.text_input("Lab hours", value="" if d["lab_hours"] is None else str(d["lab_hours"])),
                "status": select_field(form, "status", "Status", COURSE_STATUSES),
            }
            prerequisites = st.multiselect("Prerequisites", known_codes, default=d["prerequisites"])
            save = st.form_submit_button("Save")
            cancel = st.form_submit_button("Cancel")
        if cancel:
            form.cancel()
            st.rerun()
        if save:
            try:
                for field, value in values.items():
                    form.set_field(field, value)
                sync_set(form, "prerequisites", prerequisites)
            except FormValidationError as e:
                for field, msg in e.errors.items():
                    st.error(f"{field}: {msg}")
            else:
                commit_form(form, store)


# ---------------- Statistics ----------------
def breakdown_chart(rows, title, label):
    df = pd.DataFrame(rows)
    if df.empty:
        st.info(f"No data for {title.lower()}.")
        return
    fig = px.bar(df, x="key", y="count", labels={"key": label, "count": "Count"}, title=title,
                 template=ctx.chart_template)
    fig.update_layout(margin=dict(l=10, r=10, t=30, b=10))
    st.plotly_chart(fig, use_container_width=True)


def distribution_chart(rows, x, y, title, label):
    df = pd.DataFrame(rows)
    if df.empty or not df[y].any():
        st.info(f"No data for {title.lower()}.")
        return
    fig = px.bar(df, x=x, y=y, labels={x: label, y: y.replace("_", " ").capitalize()}, title=title,
                 template=ctx.chart_template)
    fig.update_layout(margin=dict(l=10, r=10, t=30, b=10))
    st.plotly_chart(fig, use_container_width=True)


def analytics_section(api: ApiClient) -> None:
    st.subheader("Analytics")
    tab_rooms, tab_teachers, tab_courses, tab_timetables = st.tabs(["Classrooms", "Teachers", "Courses", "Timetables"])
    try:
        with tab_rooms:
            buildings = ListView(get_store(ROOMS.resource)).distinct_values("building")
            building = st.selectbox("Building", ["all"] + buildings, key="analytics_building")
            data = api.get_analytics("classrooms", {"building": building})
            c1, c2, c3 = st.columns(3)
            c1.metric("Active rooms", data["summary"]["total_classrooms"])
            c2.metric("Average capacity", data["summary"]["avg_capacity"])
            c3.metric("Total capacity", data["summary"]["total_capacity"])
            left, right = st.columns(2)
            with left:
                distribution_chart(data["capacity_distribution"], "bucket", "count", "Rooms by capacity", "Seats")
            with right:
                distribution_chart(data["feature_utilization"], "feature", "count", "Feature utilisation", "Feature")
            st.dataframe(pd.DataFrame(data["building_distribution"]), use_container_width=True, hide_index=True)

        with tab_teachers:
            departments = ListView(get_store(TEACHERS.resource)).distinct_values("department")
            department = st.selectbox("Department", ["all"] + departments, key="analytics_department")
            data = api.get_analytics("teachers", {"department": department})
            c1, c2, c3 = st.columns(3)
            c1.metric("Active teachers", data["summary"]["total_teachers"])
            c2.metric("Average max hours", data["summary"]["avg_max_hours"])
            c3.metric("Scheduled hours", data["summary"]["total_scheduled_hours"])
            distribution_chart(data["workload_distribution"], "bucket", "count",
                               "Scheduled hours per week (published timetables)", "Hours")
            st.dataframe(pd.DataFrame(data["by_designation"]), use_container_width=True, hide_index=True)

        with tab_courses:
            data = api.get_analytics("courses")
            c1, c2, c3 = st.columns(3)
            c1.metric("Active courses", data["summary"]["total_courses"])
            c2.metric("Average hours / week", data["summary"]["avg_hours_per_week"])
            c3.metric("Total weekly hours", data["summary"]["total_hours"])
            distribution_chart(data["semester_distribution"], "semester", "count", "Courses per semester", "Semester")
            st.dataframe(pd.DataFrame(data["program_distribution"]), use_container_width=True, hide_index=True)

        with tab_timetables:
            data = api.get_analytics("timetables")
            c1, c2, c3 = st.columns(3)
            c1.metric("Timetables", data["summary"]["total_timetables"])
            c2.metric("Entries", data["summary"]["total_entries"])
            c3.metric("Scheduled hours", data["summary"]["total_hours"])
            st.dataframe(pd.DataFrame(data["by_status"]), use_container_width=True, hide_index=True)
    except ApiError as e:
        show_api_error(e)


def statistics_page():
    api = get_api()
    try:
        stats = api.get_data_statistics()
        report = api.validate_data()
        overview = api.get_dashboard_overview()
    except ApiError as e:
        st.error(f"Could not load statistics: {e.message}")
        if st.button("Retry"):
            st.rerun()
        return

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Teachers", stats["teachers"]["total"], f"{stats['teachers']['active']} active")
    c2.metric("Classrooms", stats["classrooms"]["total"], f"{stats['classrooms']['active']} active")
    c3.metric("Courses", stats["courses"]["total"], f"{stats['courses']['active']} active")
    c4.metric("Timetables", overview["counts"]["timetables"])

    st.markdown("---")
    left, mid, right = st.columns(3)
    with left:
        breakdown_chart(stats["teachers"]["by_department"], "Teachers by department", "Department")
    with mid:
        breakdown_chart(stats["classrooms"]["by_type"], "Classrooms by type", "Type")
    with right:
        breakdown_chart(stats["courses"]["by_program"], "Courses by program", "Program")

    st.markdown("---")
    st.subheader("Data readiness")
    if report["overall"]["ready"]:
        st.success("All data is ready for timetable generation.")
    else:
        st.warning("Data is not ready yet: fix the issues below.")
    for section in ("teachers", "classrooms", "courses"):
        part = report[section]
        with st.expander(f"{section.capitalize()}: {part['count']} active, {len(part['issues'])} issues"):
            for issue in part["issues"]:
                st.write(f"- {issue}")

    if overview["recent_timetables"]:
        st.subheader("Recent timetables")
        st.dataframe(pd.DataFrame(overview["recent_timetables"]), use_container_width=True)
        dist = pd.DataFrame(overview["status_distribution"])
        fig = px.pie(dist, names="status", values="count", hole=0.35, title="Timetable status distribution",
                     template=ctx.chart_template)
        st.plotly_chart(fig, use_container_width=True)

    st.markdown("---")
    analytics_section(api)


health = get_api().health()
if health["status"] == "up":
    st.sidebar.success(f"API up ({health['latency_ms']} ms)")
else:
    st.sidebar.error(f"API down: {health['error']}")

if refresh_btn:
    for resource in KINDS:
        get_store(resource).refresh()
    st.success("Data refreshed.")

if page == "Classrooms":
    classrooms_page()
elif page == "Teachers":
    teachers_page()
elif page == "Courses":
    courses_page()
else:
    statistics_page()
