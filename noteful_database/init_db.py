"""
Database initialization/migration script.

Run `python -m noteful_database.init_db` to create all required tables in the
database named by DATABASE_URL.
"""
from noteful_database.db import get_database_url, make_engine
from noteful_database.models import Base


# PUBLIC_INTERFACE
def init_db(engine):
    """Initializes the database by creating all tables if they do not exist."""
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    init_db(make_engine(get_database_url()))
    print("Database tables created successfully.")
