import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship

from .database import Base


def new_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class Room(Base):
    __tablename__ = "classrooms"
    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    building = Column(String, index=True)
    floor = Column(String, default="")
    type = Column(String, index=True)
    capacity = Column(Integer)
    features = Column(JSON, default=list)
    availability = Column(JSON, default=dict)  # day -> ["09:00-12:00", ...]
    status = Column(String, default="Active")

    def __repr__(self):
        return f"<Room {self.name}>"


class Teacher(Base):
    __tablename__ = "teachers"
    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, default="")
    phone = Column(String, default="")
    department = Column(String, index=True)
    designation = Column(String, default="")
    qualification = Column(String, default="")
    experience = Column(String, default="")
    subjects = Column(JSON, default=list)
    max_hours_per_week = Column(Integer)
    availability = Column(JSON, default=dict)  # day -> {available, start_time, end_time}
    priority = Column(String, default="medium")
    status = Column(String, default="Active")

    def __repr__(self):
        return f"<Teacher {self.name}>"


class Course(Base):
    __tablename__ = "courses"
    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    code = Column(String, unique=True, index=True, nullable=False)
    program = Column(String, index=True)
    semester = Column(Integer)
    credits = Column(Integer, default=0)
    type = Column(String, default="Theory")
    hours_per_week = Column(Integer)
    has_lab = Column(Boolean, default=False)
    lab_hours = Column(Integer, nullable=True)
    prerequisites = Column(JSON, default=list)
    status = Column(String, default="Active")

    def __repr__(self):
        return f"<Course {self.code}>"


class Timetable(Base):
    __tablename__ = "timetables"
    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    academic_year = Column(String, index=True)
    semester = Column(Integer)
    department = Column(String, index=True)
    year = Column(Integer)
    status = Column(String, default="draft", index=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    entries = relationship("TimetableEntry", back_populates="timetable",
                           cascade="all, delete-orphan", order_by="TimetableEntry.id")
    comments = relationship("TimetableComment", back_populates="timetable",
                            cascade="all, delete-orphan", order_by="TimetableComment.id")

    def __repr__(self):
        return f"<Timetable {self.name} ({self.status})>"


class TimetableEntry(Base):
    __tablename__ = "timetable_entries"
    id = Column(Integer, primary_key=True, index=True)
    timetable_id = Column(String, ForeignKey("timetables.id"), index=True)
    day = Column(String, index=True)  # e.g. Monday
    start_time = Column(String)
    end_time = Column(String)
    course_code = Column(String, default="")
    course_name = Column(String, default="")
    session_type = Column(String, default="Lecture")
    teacher = Column(String, default="")
    classroom = Column(String, default="")
    program = Column(String, default="")
    student_count = Column(Integer, default=0)

    timetable = relationship("Timetable", back_populates="entries")


class TimetableComment(Base):
    __tablename__ = "timetable_comments"
    id = Column(Integer, primary_key=True, index=True)
    timetable_id = Column(String, ForeignKey("timetables.id"), index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    timetable = relationship("Timetable", back_populates="comments")
