import os
from types import SimpleNamespace

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from medbook.booking.enums import DoctorStatus, UserRole  # noqa: E402
from medbook.booking.policy import Actor  # noqa: E402
from medbook.booking.sql_store import SqlBookingStore  # noqa: E402
from medbook.database import Base  # noqa: E402
from medbook.models.doctor_profile import DoctorProfile  # noqa: E402
from medbook.models.user import User  # noqa: E402


def add_user(db, name: str, email: str, role: UserRole) -> User:
    user = User(name=name, email=email, hashed_password='', role=role.value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_doctor(db, user: User, status: DoctorStatus, specialization: str = 'Cardiology') -> DoctorProfile:
    profile = DoctorProfile(
        user_id=user.id,
        specialization=specialization,
        hospital='City Clinic',
        location='Downtown',
        fee=50,
        experience=8,
        status=status.value,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def seed_clinic(db) -> SimpleNamespace:
    admin = add_user(db, 'Ada Admin', 'admin@medbook.test', UserRole.ADMIN)
    doctor_user = add_user(db, 'Dana Doctor', 'dana@medbook.test', UserRole.DOCTOR)
    other_doctor_user = add_user(db, 'Omar Other', 'omar@medbook.test', UserRole.DOCTOR)
    pending_doctor_user = add_user(db, 'Pat Pending', 'pending@medbook.test', UserRole.DOCTOR)
    patient_one = add_user(db, 'Paula Patient', 'p1@medbook.test', UserRole.PATIENT)
    patient_two = add_user(db, 'Peter Patient', 'p2@medbook.test', UserRole.PATIENT)

    doctor = add_doctor(db, doctor_user, DoctorStatus.APPROVED)
    other_doctor = add_doctor(db, other_doctor_user, DoctorStatus.APPROVED, specialization='Dermatology')
    pending_doctor = add_doctor(db, pending_doctor_user, DoctorStatus.PENDING, specialization='Neurology')

    return SimpleNamespace(
        admin=admin,
        doctor=doctor,
        other_doctor=other_doctor,
        pending_doctor=pending_doctor,
        patient_one=patient_one,
        patient_two=patient_two,
        admin_actor=Actor(id=admin.id, role=UserRole.ADMIN),
        doctor_actor=Actor(id=doctor_user.id, role=UserRole.DOCTOR),
        other_doctor_actor=Actor(id=other_doctor_user.id, role=UserRole.DOCTOR),
        pending_doctor_actor=Actor(id=pending_doctor_user.id, role=UserRole.DOCTOR),
        p1=Actor(id=patient_one.id, role=UserRole.PATIENT),
        p2=Actor(id=patient_two.id, role=UserRole.PATIENT),
    )


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clinic(db) -> SimpleNamespace:
    return seed_clinic(db)


@pytest.fixture
def store(db) -> SqlBookingStore:
    return SqlBookingStore(db)
