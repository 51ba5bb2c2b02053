"""Pytest configuration: in-memory database, seeded ledger and principals."""

import os
import uuid
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

# Set test database URL BEFORE any imports from src
# This ensures the SessionLocal and engine use an in-memory database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.models import (  # noqa: E402
    Base,
    Contract,
    ContractType,
    Organization,
    OrganizationType,
    Polygon,
    Trip,
)
from src.services.authorization import Principal, Role  # noqa: E402
from src.services.clock import FixedClock  # noqa: E402
from src.services.config import Settings  # noqa: E402
from src.services.ledger_gateway import LedgerGateway  # noqa: E402


class FakeActRenderer:
    """Act renderer that records documents instead of drawing them."""

    def __init__(self):
        self.documents = []

    def generate(self, doc) -> bytes:
        self.documents.append(doc)
        return b"%PDF-fake"


@pytest.fixture
def db_session():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def gateway(db_session):
    return LedgerGateway(db_session)


@pytest.fixture
def settings():
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 2, 1, 9, 30))


@pytest.fixture
def fake_renderer():
    return FakeActRenderer()


def add_trip(db_session, **fields) -> Trip:
    fields.setdefault("status", "OK")
    trip = Trip(**fields)
    db_session.add(trip)
    db_session.flush()
    return trip


@pytest.fixture
def trip_factory(db_session):
    """Add a trip to the ledger (flushed, not committed)."""
    return lambda **fields: add_trip(db_session, **fields)


@pytest.fixture
def ledger(db_session):
    """Seeded organizations, polygons, contracts and trips.

    Contractor contract: 3 OK trips at the south polygon in January, entry
    volumes 2.222 + 3.333 + 1.111 = 6.666 m3, plus a rejected trip and a
    February trip. Landfill contract: north polygon, two trips with entry
    minus exit volumes 8 + 4 = 12 m3.
    """
    akimat = Organization(name="City Akimat", type=OrganizationType.AKIMAT, bin="000000000001",
                          head_full_name="A. Akimov", address="Main st. 1")
    contractor = Organization(name="Snow Service", type=OrganizationType.CONTRACTOR, bin="000000000002",
                              head_full_name="S. Snegov", phone="+7 700 000 00 02")
    other_contractor = Organization(name="Alpha Clean", type=OrganizationType.CONTRACTOR)
    test_contractor = Organization(name="Test Contractor", type=OrganizationType.CONTRACTOR)
    landfill = Organization(name="North Landfill", type=OrganizationType.LANDFILL, bin="000000000003",
                            head_full_name="L. Polygonov")
    db_session.add_all([akimat, contractor, other_contractor, test_contractor, landfill])
    db_session.flush()

    north = Polygon(name="North Polygon", organization_id=landfill.id)
    south = Polygon(name="South Polygon")
    db_session.add_all([north, south])
    db_session.flush()

    contractor_contract = Contract(
        name="Snow removal 2025",
        contract_type=ContractType.CONTRACTOR_SERVICE,
        contractor_id=contractor.id,
        customer_org_id=akimat.id,
        price_per_m3=Decimal("500"),
        budget_total=Decimal("100000"),
        start_date=date(2025, 1, 1),
        end_date=date(2025, 3, 31),
    )
    landfill_contract = Contract(
        name="Snow disposal 2025",
        contract_type=ContractType.LANDFILL_SERVICE,
        landfill_id=landfill.id,
        customer_org_id=akimat.id,
        price_per_m3=Decimal("200"),
        budget_total=Decimal("0"),
        start_date=date(2025, 1, 1),
        end_date=date(2025, 3, 31),
    )
    landfill_contract.polygons.append(north)
    db_session.add_all([contractor_contract, landfill_contract])
    db_session.flush()

    contractor_trips = [
        add_trip(db_session, contract_id=contractor_contract.id, contractor_id=contractor.id,
                 polygon_id=south.id, entry_at=datetime(2025, 1, 10, 8, 0), exit_at=datetime(2025, 1, 10, 8, 20),
                 vehicle_plate_number="123ABC02", detected_volume_entry=Decimal("2.222")),
        add_trip(db_session, contract_id=contractor_contract.id, contractor_id=contractor.id,
                 polygon_id=south.id, entry_at=datetime(2025, 1, 11, 9, 0),
                 vehicle_plate_number="123ABC02", detected_volume_entry=Decimal("3.333")),
        add_trip(db_session, contract_id=contractor_contract.id, contractor_id=contractor.id,
                 polygon_id=south.id, entry_at=datetime(2025, 1, 31, 23, 59),
                 detected_plate_number="777XYZ02", detected_volume_entry=Decimal("1.111")),
    ]
    rejected_trip = add_trip(db_session, contract_id=contractor_contract.id, contractor_id=contractor.id,
                             polygon_id=south.id, status="REJECTED", entry_at=datetime(2025, 1, 12, 10, 0),
                             detected_volume_entry=Decimal("9.000"))
    february_trip = add_trip(db_session, contract_id=contractor_contract.id, contractor_id=contractor.id,
                             polygon_id=south.id, entry_at=datetime(2025, 2, 1, 0, 0),
                             detected_volume_entry=Decimal("4.000"))

    landfill_trips = [
        add_trip(db_session, contractor_id=other_contractor.id, polygon_id=north.id,
                 entry_at=datetime(2025, 1, 15, 7, 0), exit_at=datetime(2025, 1, 15, 7, 10),
                 detected_volume_entry=Decimal("10"), detected_volume_exit=Decimal("2")),
        add_trip(db_session, contractor_id=test_contractor.id, polygon_id=north.id,
                 entry_at=datetime(2025, 1, 16, 7, 0),
                 detected_volume_entry=Decimal("5"), detected_volume_exit=Decimal("1"),
                 total_volume_m3=Decimal("4")),
    ]
    db_session.commit()

    return SimpleNamespace(
        akimat=akimat,
        contractor=contractor,
        other_contractor=other_contractor,
        test_contractor=test_contractor,
        landfill=landfill,
        north=north,
        south=south,
        contractor_contract=contractor_contract,
        landfill_contract=landfill_contract,
        contractor_trips=contractor_trips,
        rejected_trip=rejected_trip,
        february_trip=february_trip,
        landfill_trips=landfill_trips,
    )


def make_principal(org_id: uuid.UUID, role: Role) -> Principal:
    return Principal(org_id=org_id, user_id=uuid.uuid4(), role=role)


@pytest.fixture
def akimat_principal(ledger):
    return make_principal(ledger.akimat.id, Role.AKIMAT)


@pytest.fixture
def contractor_principal(ledger):
    return make_principal(ledger.contractor.id, Role.CONTRACTOR)


@pytest.fixture
def landfill_principal(ledger):
    return make_principal(ledger.landfill.id, Role.LANDFILL)
