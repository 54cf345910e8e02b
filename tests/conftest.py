"""Root conftest: in-memory SQLite schema and shared fixtures."""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine

from waterdesk.constants import MANILA_TZ
from waterdesk.models.bill import Bill
from waterdesk.models.customer import AccountProfile
from waterdesk.models.tariff import ChargeBreakdown, SystemSettings
from waterdesk.staging.memory import MemoryStagingArea
from waterdesk.tariff.base import TariffCalculator

# Matches Alembic head: 8e4d27c15a60 (support_tickets)
SCHEMA_DDL = """
CREATE TABLE customers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    account_number VARCHAR(32) NOT NULL UNIQUE,
    display_name TEXT NOT NULL DEFAULT '',
    service_type VARCHAR(64) NOT NULL DEFAULT 'Residential',
    meter_size VARCHAR(16) NOT NULL DEFAULT '1/2"',
    service_address TEXT NOT NULL DEFAULT '',
    account_status VARCHAR(32) NOT NULL DEFAULT 'Active',
    created_at DATETIME NOT NULL
);

CREATE TABLE bills (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    customer_id INTEGER NOT NULL REFERENCES customers(id),
    billing_period VARCHAR(7) NOT NULL,
    consumption FLOAT NOT NULL DEFAULT 0,
    bill_date DATETIME NOT NULL,
    due_date DATETIME NOT NULL,
    previous_unpaid_amount INTEGER NOT NULL DEFAULT 0,
    senior_citizen_discount INTEGER NOT NULL DEFAULT 0,
    status VARCHAR(16) NOT NULL DEFAULT 'Unpaid',
    payment_date DATETIME,
    amount_paid INTEGER,
    payment_method VARCHAR(32),
    payment_reference VARCHAR(64),
    created_at DATETIME NOT NULL
);

CREATE INDEX ix_bills_customer_id_bill_date ON bills (customer_id, bill_date);

CREATE TABLE support_tickets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    customer_id INTEGER NOT NULL REFERENCES customers(id),
    issue_type VARCHAR(128) NOT NULL,
    description TEXT NOT NULL,
    status VARCHAR(16) NOT NULL DEFAULT 'Open',
    submitted_at DATETIME NOT NULL
);
"""


@pytest.fixture()
def db_engine() -> Engine:
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()
    yield conn
    conn.close()


class StubCalculator(TariffCalculator):
    """Returns a fixed 10 m³ Residential breakdown: 207.20 current charges."""

    def __init__(self, breakdown: ChargeBreakdown | None = None) -> None:
        self.breakdown = breakdown or ChargeBreakdown(
            consumption=10,
            service_type="Residential",
            meter_size="1/2",
            basic_charge=15000,
            fcda=500,
            environmental_charge=1000,
            maintenance_service_charge=2000,
            vat=2220,
            total_calculated_charges=20720,
        )
        self.calls: list[tuple] = []

    def calculate(
        self,
        consumption: float,
        service_type: str,
        meter_size: str = '1/2"',
        system_settings: SystemSettings | None = None,
    ) -> ChargeBreakdown:
        self.calls.append((consumption, service_type, meter_size))
        return self.breakdown


def _sample_profile(**overrides) -> AccountProfile:
    defaults = dict(
        id=1,
        account_number="AGWA-25000001",
        display_name="Maria Santos",
        service_type="Residential",
        meter_size='1/2"',
        service_address="12 Mabini St, Quezon City",
    )
    defaults.update(overrides)
    return AccountProfile(**defaults)


def _sample_bill(customer_id: int = 1, **overrides) -> Bill:
    defaults = dict(
        customer_id=customer_id,
        billing_period="2025-10",
        consumption=10,
        bill_date=datetime(2025, 10, 5, tzinfo=MANILA_TZ),
        due_date=datetime(2025, 10, 20, tzinfo=MANILA_TZ),
    )
    defaults.update(overrides)
    return Bill(**defaults)


@pytest.fixture()
def sample_profile():
    return _sample_profile


@pytest.fixture()
def sample_bill():
    return _sample_bill


@pytest.fixture()
def stub_calculator() -> StubCalculator:
    return StubCalculator()


@pytest.fixture()
def staging() -> MemoryStagingArea:
    return MemoryStagingArea(slots={})
