from sqlmodel import Session, SQLModel, create_engine

from app import models  # noqa: F401  registers the resource tables on SQLModel.metadata
from app.core.config import settings

engine = create_engine(str(settings.SQLALCHEMY_DATABASE_URI), pool_pre_ping=True)


def init_db(session: Session) -> None:
    # Tables are created from the SQLModel metadata; the gateway only needs
    # them to exist.
    SQLModel.metadata.create_all(session.get_bind())
