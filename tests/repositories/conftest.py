import pytest
from sqlalchemy import Connection

from waterdesk.models.customer import AccountProfile
from waterdesk.repositories.sqlalchemy import (
    SQLAlchemyBillRepository,
    SQLAlchemyCustomerRepository,
    SQLAlchemyTicketRepository,
)


@pytest.fixture()
def bill_repo(db_connection: Connection) -> SQLAlchemyBillRepository:
    return SQLAlchemyBillRepository(db_connection)


@pytest.fixture()
def customer_repo(db_connection: Connection) -> SQLAlchemyCustomerRepository:
    return SQLAlchemyCustomerRepository(db_connection)


@pytest.fixture()
def ticket_repo(db_connection: Connection) -> SQLAlchemyTicketRepository:
    return SQLAlchemyTicketRepository(db_connection)


@pytest.fixture()
def customer(customer_repo: SQLAlchemyCustomerRepository) -> AccountProfile:
    return customer_repo.create(
        AccountProfile(account_number="AGWA-25000001", display_name="Maria Santos", service_address="Quezon City")
    )
