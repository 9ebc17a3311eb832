"""Pytest configuration and shared fixtures."""

import os

# Point settings at an in-memory database BEFORE any imports from propertyhub
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from datetime import date, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from propertyhub.database import get_db  # noqa: E402
from propertyhub.main import app  # noqa: E402
from propertyhub.models import Base, Property, Resident, User  # noqa: E402
from propertyhub.services.invoice_service import InvoiceDetails  # noqa: E402


@pytest.fixture
def test_engine():
    """Fresh in-memory database with all tables created."""
    engine = create_engine(
        "sqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_db_session(test_engine):
    """Provide a test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(test_db_session):
    """Provide a FastAPI test client bound to the test session."""

    def override_get_db():
        yield test_db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def building(test_db_session):
    """A manager, their property with three active residents and one inactive.

    Also creates a second manager with a property of their own, for
    ownership filtering tests.
    """
    manager = User(first_name="Maria", last_name="Manager", email="maria@example.com")
    other_manager = User(first_name="Oscar", last_name="Other", email="oscar@example.com")
    test_db_session.add_all([manager, other_manager])
    test_db_session.flush()

    prop = Property(name="Maple Court", address="1 Maple St", property_manager_id=manager.id)
    other_prop = Property(name="Oak House", property_manager_id=other_manager.id)
    test_db_session.add_all([prop, other_prop])
    test_db_session.flush()

    residents = []
    for first, last, unit, active in [
        ("Alice", "Adams", "101", True),
        ("Bob", "Brown", "102", True),
        ("Carol", "Clark", "103", True),
        ("Dan", "Dormant", "104", False),
    ]:
        user = User(first_name=first, last_name=last, email=f"{first.lower()}@example.com")
        test_db_session.add(user)
        test_db_session.flush()
        resident = Resident(
            user_id=user.id, property_id=prop.id, unit_number=unit, is_active=active
        )
        test_db_session.add(resident)
        residents.append(resident)

    other_user = User(first_name="Eve", last_name="Elm", email="eve@example.com")
    test_db_session.add(other_user)
    test_db_session.flush()
    other_resident = Resident(user_id=other_user.id, property_id=other_prop.id, unit_number="1A")
    test_db_session.add(other_resident)
    test_db_session.commit()

    return SimpleNamespace(
        manager_id=manager.id,
        other_manager_id=other_manager.id,
        property_id=prop.id,
        other_property_id=other_prop.id,
        resident_ids=[r.id for r in residents if r.is_active],
        inactive_resident_id=residents[3].id,
        other_resident_id=other_resident.id,
    )


@pytest.fixture
def make_details(building):
    """Factory for InvoiceDetails on the building's property."""

    def _make(amount="90.00", due_in_days=30, **overrides):
        values = dict(
            property_id=building.property_id,
            title="Monthly Maintenance",
            amount=Decimal(amount),
            issue_date=date.today(),
            due_date=date.today() + timedelta(days=due_in_days),
            description="Common area cleaning",
        )
        values.update(overrides)
        return InvoiceDetails(**values)

    return _make
