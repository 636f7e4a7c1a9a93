from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

import config
from models import Base


def make_engine(url: str = config.DATABASE_URL, echo: bool = config.SQL_ECHO) -> Engine:
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args)


engine = make_engine()
Session = sessionmaker(bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create missing tables."""
    Base.metadata.create_all(bind, checkfirst=True)


def reset_db(bind: Engine = engine) -> None:
    """Drop and recreate every table."""
    Base.metadata.drop_all(bind)
    Base.metadata.create_all(bind)
