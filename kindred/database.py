from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from kindred.core import config


engine = create_engine(
    config.DATABASE_URL,
    connect_args={"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_participant_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_participant_schema() -> None:
    global _participant_schema_checked

    if _participant_schema_checked:
        return

    with _schema_lock:
        if _participant_schema_checked:
            return

        inspector = inspect(engine)

        if 'participants' not in inspector.get_table_names():
            _participant_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('participants')}
        migration_steps = [
            ('notes', "ALTER TABLE participants ADD COLUMN notes VARCHAR DEFAULT ''"),
            ('interests', "ALTER TABLE participants ADD COLUMN interests VARCHAR DEFAULT ''"),
            ('capabilities', "ALTER TABLE participants ADD COLUMN capabilities VARCHAR DEFAULT ''"),
            ('health_concerns', "ALTER TABLE participants ADD COLUMN health_concerns VARCHAR DEFAULT ''"),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text(
                    'CREATE UNIQUE INDEX IF NOT EXISTS uq_participants_identity ON participants('
                    'lower(first_name), lower(last_name), lower(guardian), lower(contact_email))'
                )
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_participants_contact_email ON participants(contact_email)')
            )

        _participant_schema_checked = True
