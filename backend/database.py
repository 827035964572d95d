from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from .config import get_database_url

DATABASE_URL = get_database_url()

connect_args = {}
engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
    # FastAPI serves requests from a threadpool
    connect_args["check_same_thread"] = False
    if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every session sees an empty db
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(DATABASE_URL, connect_args=connect_args, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
