import os
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from rentmyride.config import DATABASE_URL


def make_engine(url: str):
    """Create an engine; SQLite needs cross-thread access for the test client."""
    connect_args = {}
    if make_url(url).get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def load_models():
    """Import every model module so their tables are registered on ``Base``."""
    # pylint: disable=import-outside-toplevel,unused-import
    from rentmyride.models import user, business, vehicle, booking, payment, message, review  # noqa: F401


def init_database(bind=None):
    bind = bind or engine
    url = bind.url
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        folder = os.path.dirname(url.database)
        if folder and not os.path.exists(folder):
            os.makedirs(folder)
    load_models()
    Base.metadata.create_all(bind=bind)


def get_db():
    """Provide a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
