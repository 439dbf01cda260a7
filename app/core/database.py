from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings


connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=engine):
    # models must be imported so their tables are registered on Base.metadata
    import app.models.user_db.user_db  # noqa: F401
    import app.models.activity_db.activity_db  # noqa: F401
    import app.models.activity_db.request_db  # noqa: F401
    import app.models.activity_db.membership_log_db  # noqa: F401
    import app.models.rating_db.rating_db  # noqa: F401
    import app.models.chat_db.chat_db  # noqa: F401

    Base.metadata.create_all(bind=bind)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
