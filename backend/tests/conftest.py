"""
Test configuration and shared fixtures for the clinic closing test suite.

Uses in-memory SQLite by default (set TEST_DATABASE_URL to run against
PostgreSQL). Each test gets a freshly created schema that is dropped
afterwards.
"""

import os

# Must be set before core.database builds the application engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime
from decimal import Decimal
from typing import Generator, List, Optional, Tuple

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from core.database import Base
from models.clinic import Clinic
from models.user import User
from models.user_clinic_association import UserClinicAssociation
from models.doctor_contract import DoctorContract
from models.room import Room
from models.room_booking import RoomBooking
from models.patient import Patient
from models.product import Product


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")


@pytest.fixture(scope="session")
def db_engine():
    """
    Create a database engine for the test session.

    In-memory SQLite needs a single shared connection (StaticPool) that may be
    used from the TestClient's worker thread.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    else:
        engine = create_engine(TEST_DATABASE_URL, poolclass=NullPool, echo=False)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a session on a freshly created schema, dropped after the test."""
    Base.metadata.create_all(bind=db_engine)
    TestingSession = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=db_engine)


def create_clinic(db_session: Session, name: str = "Clínica Central", is_active: bool = True) -> Clinic:
    """Create and commit a clinic."""
    clinic = Clinic(name=name, is_active=is_active)
    db_session.add(clinic)
    db_session.commit()
    return clinic


def create_user_with_clinic_association(
    db_session: Session,
    clinic: Clinic,
    full_name: str,
    email: str,
    roles: Optional[List[str]] = None,
    is_active: bool = True
) -> Tuple[User, UserClinicAssociation]:
    """
    Create a user and associate them with a clinic.

    Returns:
        Tuple of (user, association)
    """
    user = User(email=email)
    db_session.add(user)
    db_session.flush()

    association = UserClinicAssociation(
        user_id=user.id,
        clinic_id=clinic.id,
        roles=roles if roles is not None else ["doctor"],
        full_name=full_name,
        is_active=is_active
    )
    db_session.add(association)
    db_session.commit()
    return user, association


def create_contract(
    db_session: Session,
    clinic: Clinic,
    user: User,
    contract_kind: str = "hourly_rental",
    rate: str = "150.00",
    is_active: bool = True
) -> DoctorContract:
    """Create and commit a doctor contract."""
    contract = DoctorContract(
        clinic_id=clinic.id,
        user_id=user.id,
        contract_kind=contract_kind,
        rate=Decimal(rate),
        is_active=is_active
    )
    db_session.add(contract)
    db_session.commit()
    return contract


def create_booking(
    db_session: Session,
    clinic: Clinic,
    room: Room,
    user: User,
    start: datetime,
    end: datetime
) -> RoomBooking:
    """Create and commit a room booking without overlap checks."""
    booking = RoomBooking(
        clinic_id=clinic.id,
        room_id=room.id,
        user_id=user.id,
        start_time=start,
        end_time=end
    )
    db_session.add(booking)
    db_session.commit()
    return booking


@pytest.fixture
def clinic(db_session) -> Clinic:
    """An active clinic."""
    return create_clinic(db_session)


@pytest.fixture
def other_clinic(db_session) -> Clinic:
    """A second tenant, for isolation checks."""
    return create_clinic(db_session, name="Clínica Norte")


@pytest.fixture
def doctor(db_session, clinic) -> User:
    """An active doctor of the clinic."""
    user, _ = create_user_with_clinic_association(
        db_session, clinic, full_name="Dra. Ana Souza", email="ana@example.com"
    )
    return user


@pytest.fixture
def second_doctor(db_session, clinic) -> User:
    """Another active doctor of the clinic."""
    user, _ = create_user_with_clinic_association(
        db_session, clinic, full_name="Dr. Bruno Lima", email="bruno@example.com"
    )
    return user


@pytest.fixture
def room(db_session, clinic) -> Room:
    """A room of the clinic."""
    room = Room(clinic_id=clinic.id, name="Sala 1")
    db_session.add(room)
    db_session.commit()
    return room


@pytest.fixture
def patient(db_session, clinic) -> Patient:
    """A patient of the clinic."""
    patient = Patient(clinic_id=clinic.id, full_name="Carlos Pereira", phone_number="11999990000")
    db_session.add(patient)
    db_session.commit()
    return patient


@pytest.fixture
def product(db_session, clinic) -> Product:
    """A stocked product costing 100.00 at the distributor."""
    product = Product(
        clinic_id=clinic.id,
        name="Toxina botulínica",
        distributor_cost=Decimal("100.00"),
        stock_quantity=10
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture
def factories():
    """Data builders for tests that need more than the default fixtures."""
    class _Factories:
        clinic = staticmethod(create_clinic)
        user = staticmethod(create_user_with_clinic_association)
        contract = staticmethod(create_contract)
        booking = staticmethod(create_booking)
    return _Factories
