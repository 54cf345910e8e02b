"""Seed the database with demo customers and bills for local development.

Usage:
    python -m waterdesk.scripts.seed
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta

from faker import Faker
from rich.console import Console
from rich.table import Table
from sqlalchemy import text

from waterdesk.constants import MANILA_TZ, format_period
from waterdesk.db import close_connection, get_connection, initialize_db
from waterdesk.models import format_php
from waterdesk.models.bill import Bill, PaymentDetails, PaymentMethod
from waterdesk.models.customer import AccountProfile
from waterdesk.repositories.base import BillRepository, CustomerRepository
from waterdesk.repositories.factory import get_bill_repository, get_customer_repository
from waterdesk.services.ledger_service import BillLedger
from waterdesk.services.payment_flow import generate_reference

console = Console()
fake = Faker("en_PH")

NUM_CUSTOMERS = 6
MONTHS_OF_BILLS = 6

TABLES_TO_CLEAR = [
    "support_tickets",
    "bills",
    "customers",
]

# (service type, meter size, weight)
ACCOUNT_TEMPLATES = [
    ("Residential", '1/2"', 5),
    ("Residential Low-Income", '1/2"', 2),
    ("Semi-Business", '3/4"', 2),
    ("Commercial", '1"', 1),
]

SENIOR_CITIZEN_DISCOUNT = 2500


def _clear_all(conn) -> None:
    console.print("\n[yellow]Clearing all tables...[/yellow]")
    for table in TABLES_TO_CLEAR:
        conn.execute(text(f"DELETE FROM {table}"))  # noqa: S608
        console.print(f"  Cleared [dim]{table}[/dim]")
    conn.commit()
    console.print("[green]All tables cleared.[/green]\n")


def _months_back(today: datetime, months: int) -> datetime:
    index = today.year * 12 + today.month - 1 - months
    return today.replace(year=index // 12, month=index % 12 + 1, day=5)


def _account_number(index: int) -> str:
    return f"AGWA-{datetime.now(MANILA_TZ).year % 100:02d}{index + 1:06d}"


def _create_customers(customer_repo: CustomerRepository) -> list[AccountProfile]:
    console.print("[cyan]Creating customers...[/cyan]")

    templates = random.choices(
        ACCOUNT_TEMPLATES,
        weights=[t[2] for t in ACCOUNT_TEMPLATES],
        k=NUM_CUSTOMERS,
    )
    customers = []
    for i, (service_type, meter_size, _) in enumerate(templates):
        profile = customer_repo.create(
            AccountProfile(
                account_number=_account_number(i),
                display_name=fake.name(),
                service_type=service_type,
                meter_size=meter_size,
                service_address=f"{fake.street_address()}, {fake.city()}",
            )
        )
        console.print(f"  {profile.account_number}: {profile.display_name} ({service_type}, {meter_size})")
        customers.append(profile)

    console.print(f"[green]{len(customers)} customers created.[/green]\n")
    return customers


def _create_bills(bill_repo: BillRepository, ledger: BillLedger, customers: list[AccountProfile]) -> int:
    console.print("[cyan]Generating bills...[/cyan]")

    table = Table(title="Generated Bills")
    table.add_column("Account", style="cyan")
    table.add_column("Period")
    table.add_column("m³", justify="right")
    table.add_column("Amount", justify="right")
    table.add_column("Status", justify="center")

    today = datetime.now(MANILA_TZ).replace(hour=0, minute=0, second=0, microsecond=0)
    total_bills = 0

    for profile in customers:
        assert profile.id is not None
        is_senior = random.random() > 0.7
        carry_over = 0

        for months_ago in range(MONTHS_OF_BILLS - 1, -1, -1):
            bill_date = _months_back(today, months_ago)
            consumption = round(random.uniform(6, 45), 1)
            if profile.service_type == "Commercial":
                consumption = round(consumption * 4, 1)

            bill = bill_repo.create(
                Bill(
                    customer_id=profile.id,
                    billing_period=bill_date.strftime("%Y-%m"),
                    consumption=consumption,
                    bill_date=bill_date,
                    due_date=bill_date + timedelta(days=15),
                    previous_unpaid_amount=carry_over,
                    senior_citizen_discount=SENIOR_CITIZEN_DISCOUNT if is_senior else 0,
                )
            )
            priced = ledger.derive_amount(bill, profile)
            assert priced.id is not None and priced.amount is not None and priced.charges is not None

            # Older bills are mostly settled; the latest two stay open.
            if months_ago > 1 and random.random() > 0.25:
                method = random.choice(list(PaymentMethod))
                bill_repo.mark_paid(
                    priced.id,
                    PaymentDetails(
                        payment_date=priced.due_date - timedelta(days=random.randint(0, 10)),
                        amount_paid=priced.amount,
                        payment_method=method,
                        payment_reference=generate_reference(method),
                    ),
                )
                carry_over = 0
                status = "[green]paid[/green]"
            else:
                carry_over = priced.charges.total_calculated_charges
                status = "[yellow]unpaid[/yellow]"

            table.add_row(
                profile.account_number,
                format_period(priced.billing_period),
                f"{consumption:g}",
                format_php(priced.amount),
                status,
            )
            total_bills += 1

    console.print(table)
    console.print(f"\n[green]{total_bills} bills generated.[/green]\n")
    return total_bills


def main() -> None:
    console.print("[bold magenta]waterdesk - Database Seeder[/bold magenta]")
    console.print("=" * 40)

    initialize_db()
    conn = get_connection()

    _clear_all(conn)

    customer_repo = get_customer_repository()
    bill_repo = get_bill_repository()
    ledger = BillLedger(bill_repo)

    try:
        customers = _create_customers(customer_repo)
        total_bills = _create_bills(bill_repo, ledger, customers)
    finally:
        close_connection()

    console.print("[bold green]Seeding complete![/bold green]")
    console.print(f"  Customers: {len(customers)}")
    console.print(f"  Bills:     {total_bills}")


if __name__ == "__main__":  # pragma: no cover
    main()
