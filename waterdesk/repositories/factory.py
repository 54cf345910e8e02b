from waterdesk.repositories.base import BillRepository, CustomerRepository, TicketRepository


def get_bill_repository() -> BillRepository:
    from waterdesk.db import get_connection
    from waterdesk.repositories.sqlalchemy import SQLAlchemyBillRepository

    return SQLAlchemyBillRepository(get_connection())


def get_customer_repository() -> CustomerRepository:
    from waterdesk.db import get_connection
    from waterdesk.repositories.sqlalchemy import SQLAlchemyCustomerRepository

    return SQLAlchemyCustomerRepository(get_connection())


def get_ticket_repository() -> TicketRepository:
    from waterdesk.db import get_connection
    from waterdesk.repositories.sqlalchemy import SQLAlchemyTicketRepository

    return SQLAlchemyTicketRepository(get_connection())
