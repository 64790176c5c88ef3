import os
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./medbook.db")


def build_engine(url: str):
    # FastAPI runs sync endpoints on a thread pool.
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_booking_schema_checked = False

BOOKING_INDEXES = {
    'availability_slots': [
        'CREATE INDEX IF NOT EXISTS idx_slots_doctor_date_start '
        'ON availability_slots(doctor_id, date, start_time)',
        'CREATE INDEX IF NOT EXISTS idx_slots_doctor_booked '
        'ON availability_slots(doctor_id, is_booked)',
    ],
    'appointments': [
        'CREATE INDEX IF NOT EXISTS idx_appointments_patient_date '
        'ON appointments(patient_id, date, start_time)',
        'CREATE INDEX IF NOT EXISTS idx_appointments_doctor_date '
        'ON appointments(doctor_id, date, start_time)',
        'CREATE INDEX IF NOT EXISTS idx_appointments_slot_status '
        'ON appointments(slot_id, status)',
    ],
}


def ensure_booking_schema(bind=None) -> None:
    global _booking_schema_checked

    if _booking_schema_checked:
        return

    with _schema_lock:
        if _booking_schema_checked:
            return

        target = bind or engine
        inspector = inspect(target)
        existing_tables = set(inspector.get_table_names())

        with target.begin() as connection:
            for table_name, statements in BOOKING_INDEXES.items():
                if table_name not in existing_tables:
                    continue
                for statement in statements:
                    connection.execute(text(statement))

        _booking_schema_checked = True


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
