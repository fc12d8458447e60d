import importlib
import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from shopcart.config import settings

log = logging.getLogger("shopcart.db")

DATABASE_URL = settings.DATABASE_URL
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, future=True, echo=False, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# every module declaring tables must be listed so metadata is populated
MODEL_MODULES = [
    "shopcart.models.user",
    "shopcart.models.product",
    "shopcart.models.cart_item",
    "shopcart.models.order",
]


def init_db(reset: bool = None):
    """
    Initialize DB schema.

    If `reset` is true (or RESET_DB is set to 1/true/yes when `reset` is not
    given) all tables are dropped and recreated. Otherwise existing tables are
    left in place and only missing ones are created.
    """
    if reset is None:
        reset = os.environ.get("RESET_DB", "false").lower() in ("1", "true", "yes")

    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset:
        log.info("Resetting database %s", DATABASE_URL)
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    log.debug("Database initialized with tables %s", sorted(Base.metadata.tables))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
