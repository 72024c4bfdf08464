from sqlmodel import SQLModel, create_engine

from chatrelay.core.config import settings

_connect_args = {"check_same_thread": False} if settings.db_url.startswith("sqlite") else {}

engine = create_engine(
    settings.db_url,
    echo=settings.debug,
    connect_args=_connect_args,
)


def init_db() -> None:
    import chatrelay.models  # noqa: F401 - ensure models are registered
    SQLModel.metadata.create_all(engine)
