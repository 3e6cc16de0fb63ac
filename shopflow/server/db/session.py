from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from shopflow.server.settings.config import settings

IN_MEMORY_SQLITE = ("sqlite://", "sqlite:///:memory:")


def make_engine(database_url: Optional[str] = None, *, echo: Optional[bool] = None) -> Engine:
    """
    Engine for DATABASE_URL (or the given url).

    sqlite: connections are shared across FastAPI's worker threads. An
    in-memory database lives on a single pooled connection, otherwise each
    session would open its own empty database.
    """
    url = database_url or settings.database_url
    kwargs = {"echo": settings.debug if echo is None else echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in IN_MEMORY_SQLITE:
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = make_engine()


def init_db(bind: Optional[Engine] = None) -> None:
    # tables are registered by importing shopflow.server.models
    from shopflow.server.models import __all_models  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
