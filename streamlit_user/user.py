"""
streamlit_user/user.py

Timetable viewer:
- Pick a timetable (filter by status / department / academic year)
- Filter the schedule by teacher, program or room, by day and free text
- Weekly grid or list view
- Download as CSV, JSON or a printable HTML page
- Change the timetable status and leave review comments
"""

import logging
from datetime import datetime, timezone

import pandas as pd
import plotly.express as px
import streamlit as st

from backend.schemas import TIMETABLE_STATUSES
from client.api import ApiClient
from client.config import get_client_config
from client.context import AppContext
from client.errors import ApiError
from client.exports import schedule_to_csv, schedule_to_json, schedule_to_print_html
from client.views import ListView, filter_schedule, schedule_grid

config = get_client_config()
logging.basicConfig(level=config["log_level"], format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

st.set_page_config(page_title="Timetable Viewer", layout="wide")
# Lightweight aesthetic theme for Streamlit
st.markdown(
    """
    <style>
      .block-container {padding-top: 1.2rem; padding-bottom: 2rem;}
      .stButton>button {border-radius: 10px; padding: 6px 14px}
      .stMetric {border: 1px solid #d0d7e2; border-radius: 12px; padding: 10px}
      .stDataFrame, .stTable {border-radius: 12px}
      .stAlert {border-radius: 12px}
    </style>
    """,
    unsafe_allow_html=True,
)
st.title("📅 Timetable Viewer")

GRID_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
GRID_SLOTS = [
    "09:00-10:00", "10:00-11:00", "11:00-12:00", "12:00-13:00",
    "14:00-15:00", "15:00-16:00", "16:00-17:00", "17:00-18:00",
]
LIST_COLUMNS = ["day", "start_time", "end_time", "course_code", "course_name", "session_type", "teacher",
                "classroom", "program", "student_count"]

# Sidebar controls
if "context" not in st.session_state:
    st.session_state["context"] = AppContext.from_config(config)
ctx = st.session_state["context"]
ctx.api_base = st.sidebar.text_input("API Base URL", ctx.api_base)
ctx.dark_mode = st.sidebar.toggle("Dark mode", value=ctx.dark_mode)
if ctx.dark_mode:
    st.markdown(ctx.page_css(), unsafe_allow_html=True)
st.sidebar.caption(ctx.session_caption())
api = ApiClient(ctx)
st.sidebar.markdown("---")
status_filter = st.sidebar.selectbox("Status", ["all"] + TIMETABLE_STATUSES, key="status_filter")
department_filter = st.sidebar.text_input("Department", "")
year_filter = st.sidebar.text_input("Academic year", "", placeholder="2024-25")
REFRESH = st.sidebar.button("🔄 Refresh Data")


# ---------------- Data fetchers ----------------
@st.cache_data(ttl=30)
def fetch_timetables(api_base: str, status: str, department: str, academic_year: str):
    return api.get_timetables({"status": status, "department": department, "academic_year": academic_year})


@st.cache_data(ttl=30)
def fetch_timetable(api_base: str, timetable_id: str):
    return api.get_timetable(timetable_id, projection="full")


if REFRESH:
    fetch_timetables.clear()
    fetch_timetable.clear()

try:
    timetables = fetch_timetables(ctx.api_base, status_filter, department_filter.strip(), year_filter.strip())
except ApiError as e:
    st.error(f"Failed to fetch timetables: {e.message}")
    if st.button("Retry"):
        fetch_timetables.clear()
        st.rerun()
    st.stop()

if not timetables:
    st.warning("No timetables match. Start the backend and seed it, or relax the filters.")
    st.stop()

labels = {t["id"]: f"{t['name']} · {t['academic_year']} · sem {t['semester']} ({t['status']})" for t in timetables}
selected_id = st.selectbox("Timetable", list(labels), format_func=labels.get)

try:
    timetable = fetch_timetable(ctx.api_base, selected_id)
except ApiError as e:
    st.error(f"Failed to load timetable: {e.message}")
    st.stop()

entries = timetable["entries"]
view = ListView(entries)

# ---------------- Metrics ----------------
m1, m2, m3, m4 = st.columns(4)
m1.metric("Classes / week", view.count())
m2.metric("Courses", view.distinct_count("course_code"))
m3.metric("Teachers", view.distinct_count("teacher"))
m4.metric("Rooms", view.distinct_count("classroom"))

st.markdown("---")

# ---------------- Filters ----------------
col_type, col_entity, col_day, col_q = st.columns([1, 2, 1, 2])
with col_type:
    entity_type = st.selectbox("Filter by", ["all", "teacher", "program", "room"])
with col_entity:
    field = {"teacher": "teacher", "program": "program", "room": "classroom"}.get(entity_type)
    options = view.distinct_values(field) if field else []
    entity = st.selectbox("Show", options) if options else None
with col_day:
    day = st.selectbox("Day", ["all"] + GRID_DAYS)
with col_q:
    query = st.text_input("Search", placeholder="course, teacher, program or room")

filtered = filter_schedule(entries, entity_type, entity, day, query)
mode = st.radio("View", ["Grid", "List"], horizontal=True)

if not filtered:
    st.info("No classes match your filters.")
elif mode == "Grid":
    days = GRID_DAYS if day == "all" else [day]
    st.dataframe(schedule_grid(filtered, days, GRID_SLOTS), use_container_width=True)
else:
    st.dataframe(ListView(filtered).to_frame(columns=LIST_COLUMNS), use_container_width=True, hide_index=True)

# ---------------- Downloads ----------------
d1, d2, d3 = st.columns(3)
stem = timetable["name"].replace(" ", "_").lower()
d1.download_button("⬇️ CSV", data=schedule_to_csv(filtered), file_name=f"{stem}.csv", mime="text/csv")
d2.download_button("⬇️ JSON", data=schedule_to_json(filtered), file_name=f"{stem}.json", mime="application/json")
d3.download_button("🖨️ Print view", data=schedule_to_print_html(filtered, title=timetable["name"]),
                   file_name=f"{stem}.html", mime="text/html")

st.markdown("---")

# ---------------- Load chart + review ----------------
left, right = st.columns([1.2, 1])

with left:
    st.subheader("Classes per day")
    if filtered:
        per_day = pd.DataFrame(filtered).groupby("day").size().reindex(GRID_DAYS, fill_value=0).reset_index()
        per_day.columns = ["day", "classes"]
        fig = px.bar(per_day, x="day", y="classes", labels={"day": "Day", "classes": "Classes"},
                     template=ctx.chart_template)
        fig.update_layout(margin=dict(l=10, r=10, t=20, b=10))
        st.plotly_chart(fig, use_container_width=True)

with right:
    st.subheader("Review")
    new_status = st.selectbox("Status", TIMETABLE_STATUSES, index=TIMETABLE_STATUSES.index(timetable["status"]),
                              key="review_status")
    if st.button("Update status", disabled=new_status == timetable["status"]):
        try:
            api.update_timetable_status(selected_id, new_status)
        except ApiError as e:
            st.error(f"Failed to update status: {e.message}")
        else:
            st.success(f"Status set to {new_status}")
            fetch_timetables.clear()
            fetch_timetable.clear()
            st.rerun()

    for c in timetable["comments"]:
        st.caption(f"{c['created_at']}")
        st.write(c["text"])
    comment = st.text_area("Add a comment", max_chars=500)
    if st.button("Post comment", disabled=not comment.strip()):
        try:
            api.add_timetable_comment(selected_id, comment.strip())
        except ApiError as e:
            st.error(f"Failed to post comment: {e.message}")
        else:
            fetch_timetable.clear()
            st.rerun()

st.markdown("---")
st.caption(f"Data last refreshed: {datetime.now(timezone.utc).isoformat()} UTC")
