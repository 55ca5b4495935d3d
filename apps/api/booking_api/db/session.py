from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from booking_api.core.config import settings

connect_args = {}
engine_kwargs = {"pool_pre_ping": True}
backend = make_url(settings.DATABASE_URL).get_backend_name()

if backend.startswith("postgresql"):
    connect_args["options"] = "-c timezone=utc"
    engine_kwargs["isolation_level"] = settings.DB_ISOLATION_LEVEL
elif backend == "sqlite":
    connect_args["check_same_thread"] = False
    connect_args["timeout"] = settings.SQLITE_BUSY_TIMEOUT_SECONDS

engine = create_engine(
    settings.DATABASE_URL, connect_args=connect_args, **engine_kwargs
)

if backend == "sqlite":

    @event.listens_for(engine, "connect")
    def _sqlite_connect(dbapi_connection, connection_record):
        # Take over transaction control from pysqlite so BEGIN/SAVEPOINT are ours
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _sqlite_begin(conn):
        # Writer lock up front: booking reads and the insert that follows
        # cannot interleave with another transaction's.
        conn.exec_driver_sql("BEGIN IMMEDIATE")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
