from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from painel.config import DATABASE_URL

SQLALCHEMY_DATABASE_URL = DATABASE_URL

engine_options = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    # O FastAPI pode usar a sessão fora da thread que a criou
    engine_options["connect_args"] = {"check_same_thread": False}
    if SQLALCHEMY_DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        # Banco em memória: todas as sessões precisam da mesma conexão
        engine_options["poolclass"] = StaticPool

engine = create_engine(SQLALCHEMY_DATABASE_URL, **engine_options)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def utcnow() -> datetime:
    """Instante atual em UTC, sem tzinfo (formato gravado no banco)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(dt: datetime | None) -> datetime | None:
    # SQLite devolve datetime naive; tratamos como UTC.
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_db_instant(dt: datetime) -> datetime:
    """Converte um instante aware para o formato naive UTC das colunas."""
    return as_utc(dt).replace(tzinfo=None)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
