from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config.settings import DATABASE_URL, DATA_DIR, DEBUG

Base = declarative_base()


def create_session_factory(url: str = DATABASE_URL):
    """Create an engine and a session factory for ``url``"""
    kwargs = {'echo': DEBUG}
    if url.startswith("sqlite"):
        kwargs['connect_args'] = {'check_same_thread': False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty database
            kwargs['poolclass'] = StaticPool
    engine = create_engine(url, **kwargs)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    return engine, factory


engine, SessionLocal = create_session_factory()


def init_db(bind=None):
    """Create all tables"""
    from . import models  # noqa: F401  (register tables on Base.metadata)

    if bind is None:
        bind = engine
        if DATABASE_URL.startswith("sqlite:///"):
            DATA_DIR.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=bind)
