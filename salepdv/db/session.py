from sqlalchemy import create_engine, event
from sqlalchemy.pool import QueuePool
from sqlalchemy.orm import sessionmaker, declarative_base
from salepdv.core.config import settings
import logging
import threading

DATABASE_URL = settings.DATABASE_URL

# SQLAlchemy connect_args differ between SQLite and other DBs (e.g. MySQL)
connect_args = {}
engine_kwargs = {"pool_pre_ping": True}
if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
else:
    # pool_pre_ping + pool_recycle avoid "MySQL server has gone away" on stale connections
    engine_kwargs.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
        poolclass=QueuePool,
    )

engine = create_engine(DATABASE_URL, connect_args=connect_args, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

_pool_logger = logging.getLogger("salepdv.db.pool")
_connect_count = 0
_pool_lock = threading.Lock()


@event.listens_for(engine, "connect")
def _on_connect(dbapi_connection, connection_record):
    global _connect_count
    with _pool_lock:
        _connect_count += 1
        cnt = _connect_count
    if cnt == 1 or cnt % 50 == 0:
        _pool_logger.info("SQLAlchemy pool CONNECT events: total opened=%s", cnt)


def get_db():
    """FastAPI dependency that provides a scoped SQLAlchemy Session.

    Uncommitted work is rolled back when the session closes, so a failed
    request never leaves half-applied changes behind.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_db(bind=None):
    # Import models here so they are registered on the metadata
    import salepdv.models.user  # noqa: F401
    import salepdv.models.table  # noqa: F401
    import salepdv.models.product  # noqa: F401
    import salepdv.models.pedido  # noqa: F401
    import salepdv.models.pedido_item  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
