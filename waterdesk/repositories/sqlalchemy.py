from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import SQLAlchemyError
from ulid import ULID

from waterdesk.constants import MANILA_TZ
from waterdesk.exceptions import AlreadyPaid, DataUnavailable, NotFound
from waterdesk.models.bill import Bill, BillStatus, PaymentDetails
from waterdesk.models.customer import AccountProfile
from waterdesk.models.ticket import SupportTicket
from waterdesk.repositories.base import BillRepository, CustomerRepository, TicketRepository

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(MANILA_TZ)


@contextmanager
def _store_errors(conn: Connection, operation: str) -> Iterator[None]:
    """Translate driver/connection failures into ``DataUnavailable``."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Store operation '%s' failed: %s", operation, e)
        if conn.in_transaction():
            conn.rollback()
        raise DataUnavailable(f"Could not {operation}. Please try again later.") from e


class SQLAlchemyBillRepository(BillRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, bill: Bill) -> Bill:
        with _store_errors(self.conn, "create bill"):
            result = self.conn.execute(
                text(
                    "INSERT INTO bills (uuid, customer_id, billing_period, consumption, bill_date, due_date, "
                    "previous_unpaid_amount, senior_citizen_discount, status, created_at) "
                    "VALUES (:uuid, :customer_id, :billing_period, :consumption, :bill_date, :due_date, "
                    ":previous_unpaid_amount, :senior_citizen_discount, :status, :created_at)"
                ),
                {
                    "uuid": str(ULID()),
                    "customer_id": bill.customer_id,
                    "billing_period": bill.billing_period,
                    "consumption": bill.consumption,
                    "bill_date": bill.bill_date,
                    "due_date": bill.due_date,
                    "previous_unpaid_amount": bill.previous_unpaid_amount,
                    "senior_citizen_discount": bill.senior_citizen_discount,
                    "status": bill.status.value,
                    "created_at": _now(),
                },
            )
            bill_id = result.lastrowid
            self.conn.commit()
        created = self.get_by_id(bill_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve bill after create (id={bill_id})")
        return created

    @staticmethod
    def _row_to_bill(row: RowMapping) -> Bill:
        return Bill(
            id=row["id"],
            uuid=row["uuid"],
            customer_id=row["customer_id"],
            billing_period=row["billing_period"],
            consumption=row["consumption"],
            bill_date=row["bill_date"],
            due_date=row["due_date"],
            previous_unpaid_amount=row["previous_unpaid_amount"],
            senior_citizen_discount=row["senior_citizen_discount"],
            status=BillStatus(row["status"]),
            payment_date=row["payment_date"],
            amount_paid=row["amount_paid"],
            payment_method=row["payment_method"],
            payment_reference=row["payment_reference"],
            created_at=row["created_at"],
        )

    def get_by_id(self, bill_id: int) -> Bill | None:
        with _store_errors(self.conn, "load bill"):
            row = (
                self.conn.execute(
                    text("SELECT * FROM bills WHERE id = :id"),
                    {"id": bill_id},
                )
                .mappings()
                .fetchone()
            )
        if row is None:
            return None
        return self._row_to_bill(row)

    def list_by_customer(self, customer_id: int) -> list[Bill]:
        with _store_errors(self.conn, "fetch your bills"):
            rows = (
                self.conn.execute(
                    text("SELECT * FROM bills WHERE customer_id = :customer_id ORDER BY bill_date DESC"),
                    {"customer_id": customer_id},
                )
                .mappings()
                .fetchall()
            )
        return [self._row_to_bill(row) for row in rows]

    def mark_paid(self, bill_id: int, payment: PaymentDetails) -> Bill:
        with _store_errors(self.conn, "record payment"):
            result = self.conn.execute(
                text(
                    "UPDATE bills SET status = :paid, payment_date = :payment_date, amount_paid = :amount_paid, "
                    "payment_method = :payment_method, payment_reference = :payment_reference "
                    "WHERE id = :id AND status = :unpaid"
                ),
                {
                    "paid": BillStatus.PAID.value,
                    "unpaid": BillStatus.UNPAID.value,
                    "payment_date": payment.payment_date,
                    "amount_paid": payment.amount_paid,
                    "payment_method": payment.payment_method.value,
                    "payment_reference": payment.payment_reference,
                    "id": bill_id,
                },
            )
            self.conn.commit()
        if result.rowcount == 0:
            if self.get_by_id(bill_id) is None:
                raise NotFound(bill_id)
            raise AlreadyPaid(bill_id)
        updated = self.get_by_id(bill_id)
        if updated is None:
            raise RuntimeError(f"Failed to retrieve bill after payment (id={bill_id})")
        return updated


class SQLAlchemyCustomerRepository(CustomerRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, profile: AccountProfile) -> AccountProfile:
        with _store_errors(self.conn, "create customer"):
            result = self.conn.execute(
                text(
                    "INSERT INTO customers (uuid, account_number, display_name, service_type, meter_size, "
                    "service_address, account_status, created_at) "
                    "VALUES (:uuid, :account_number, :display_name, :service_type, :meter_size, "
                    ":service_address, :account_status, :created_at)"
                ),
                {
                    "uuid": str(ULID()),
                    "account_number": profile.account_number,
                    "display_name": profile.display_name,
                    "service_type": profile.service_type,
                    "meter_size": profile.meter_size,
                    "service_address": profile.service_address,
                    "account_status": profile.account_status,
                    "created_at": _now(),
                },
            )
            customer_id = result.lastrowid
            self.conn.commit()
        created = self.get_by_id(customer_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve customer after create (id={customer_id})")
        return created

    @staticmethod
    def _row_to_profile(row: RowMapping) -> AccountProfile:
        return AccountProfile(
            id=row["id"],
            uuid=row["uuid"],
            account_number=row["account_number"],
            display_name=row["display_name"],
            service_type=row["service_type"],
            meter_size=row["meter_size"],
            service_address=row["service_address"],
            account_status=row["account_status"],
            created_at=row["created_at"],
        )

    def _fetch_one(self, where: str, params: dict) -> AccountProfile | None:
        with _store_errors(self.conn, "load customer"):
            row = self.conn.execute(text(f"SELECT * FROM customers WHERE {where}"), params).mappings().fetchone()
        if row is None:
            return None
        return self._row_to_profile(row)

    def get_by_id(self, customer_id: int) -> AccountProfile | None:
        return self._fetch_one("id = :id", {"id": customer_id})

    def get_by_account_number(self, account_number: str) -> AccountProfile | None:
        return self._fetch_one("account_number = :account_number", {"account_number": account_number})

    def list_all(self) -> list[AccountProfile]:
        with _store_errors(self.conn, "list customers"):
            rows = self.conn.execute(text("SELECT * FROM customers ORDER BY account_number")).mappings().fetchall()
        return [self._row_to_profile(row) for row in rows]


class SQLAlchemyTicketRepository(TicketRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, ticket: SupportTicket) -> SupportTicket:
        with _store_errors(self.conn, "submit ticket"):
            result = self.conn.execute(
                text(
                    "INSERT INTO support_tickets (uuid, customer_id, issue_type, description, status, submitted_at) "
                    "VALUES (:uuid, :customer_id, :issue_type, :description, :status, :submitted_at)"
                ),
                {
                    "uuid": str(ULID()),
                    "customer_id": ticket.customer_id,
                    "issue_type": ticket.issue_type,
                    "description": ticket.description,
                    "status": ticket.status,
                    "submitted_at": _now(),
                },
            )
            ticket_id = result.lastrowid
            self.conn.commit()
        created = self.get_by_id(ticket_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve ticket after create (id={ticket_id})")
        return created

    @staticmethod
    def _row_to_ticket(row: RowMapping) -> SupportTicket:
        return SupportTicket(
            id=row["id"],
            uuid=row["uuid"],
            customer_id=row["customer_id"],
            issue_type=row["issue_type"],
            description=row["description"],
            status=row["status"],
            submitted_at=row["submitted_at"],
        )

    def get_by_id(self, ticket_id: int) -> SupportTicket | None:
        with _store_errors(self.conn, "load ticket"):
            row = (
                self.conn.execute(text("SELECT * FROM support_tickets WHERE id = :id"), {"id": ticket_id})
                .mappings()
                .fetchone()
            )
        if row is None:
            return None
        return self._row_to_ticket(row)

    def list_by_customer(self, customer_id: int) -> list[SupportTicket]:
        with _store_errors(self.conn, "fetch your tickets"):
            rows = (
                self.conn.execute(
                    text("SELECT * FROM support_tickets WHERE customer_id = :customer_id ORDER BY submitted_at DESC"),
                    {"customer_id": customer_id},
                )
                .mappings()
                .fetchall()
            )
        return [self._row_to_ticket(row) for row in rows]
