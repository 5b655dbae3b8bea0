import os

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

DEFAULT_DATABASE_URL = "sqlite:///./noteful.db"


# PUBLIC_INTERFACE
def get_database_url():
    """
    Retrieves the database URL from the environment variable DATABASE_URL,
    falling back to a local SQLite file.
    """
    load_dotenv()
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


# PUBLIC_INTERFACE
def make_engine(database_url, **kwargs):
    """Creates an engine; SQLite connections are shared across threadpool workers."""
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(database_url, future=True, echo=False, **kwargs)


# PUBLIC_INTERFACE
def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
