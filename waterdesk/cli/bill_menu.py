from __future__ import annotations

import questionary
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from waterdesk.constants import format_date, format_period
from waterdesk.exceptions import AlreadyPaid, DataUnavailable, LedgerError
from waterdesk.models import format_php
from waterdesk.models.bill import Bill, PaymentMethod
from waterdesk.models.customer import AccountProfile
from waterdesk.services.assistant_service import AssistantService
from waterdesk.services.ledger_service import AccountOverview, BillLedger
from waterdesk.services.payment_flow import PaymentConfirmationFlow
from waterdesk.settings import settings

console = Console()

BACK = "Back"
CANCEL = "Cancel"
STATUS_STYLES = {"paid": "green", "overdue": "red", "pending": "yellow"}


def _status_label(bill: Bill) -> str:
    status = bill.payment_status
    return f"[{STATUS_STYLES[status]}]{status.capitalize()}[/{STATUS_STYLES[status]}]"


def _bill_label(bill: Bill) -> str:
    amount = format_php(bill.amount) if bill.amount is not None else "-"
    return f"{format_period(bill.billing_period)} - {amount} - {bill.payment_status.capitalize()}"


def _bills_table(bills: list[Bill]) -> Table:
    table = Table()
    table.add_column("Period")
    table.add_column("Consumption", justify="right")
    table.add_column("Amount", justify="right")
    table.add_column("Due Date")
    table.add_column("Status", justify="center")
    for bill in bills:
        table.add_row(
            format_period(bill.billing_period),
            f"{bill.consumption:g} m³",
            format_php(bill.amount) if bill.amount is not None else "-",
            format_date(bill.due_date),
            _status_label(bill),
        )
    return table


def _show_bill_detail(bill: Bill) -> None:
    """Display the charge breakdown and amount due of a priced bill."""
    console.print()
    console.print(f"[bold]Bill for {format_period(bill.billing_period)}[/bold]", style="cyan")
    if bill.charges is None or bill.amount is None:
        console.print("[yellow]Charges are not available for this bill.[/yellow]")
        return

    charges = bill.charges
    detail_table = Table()
    detail_table.add_column("Charge")
    detail_table.add_column("Amount", justify="right")
    detail_table.add_row("Basic Charge", format_php(charges.basic_charge))
    detail_table.add_row("FCDA", format_php(charges.fcda))
    detail_table.add_row("Environmental Charge", format_php(charges.environmental_charge))
    if charges.sewerage_charge:
        detail_table.add_row("Sewerage Charge", format_php(charges.sewerage_charge))
    detail_table.add_row("Maintenance Service Charge", format_php(charges.maintenance_service_charge))
    detail_table.add_row("Government Taxes", format_php(charges.government_taxes))
    detail_table.add_row("VAT", format_php(charges.vat))
    detail_table.add_row("[bold]Current Charges[/bold]", f"[bold]{format_php(charges.total_calculated_charges)}[/bold]")
    if bill.previous_unpaid_amount:
        detail_table.add_row("Previous Unpaid Balance", format_php(bill.previous_unpaid_amount))
    if bill.senior_citizen_discount:
        detail_table.add_row("Senior Citizen Discount", format_php(-bill.senior_citizen_discount))

    console.print(detail_table)
    console.print(f"  [bold]Total Amount Due: {format_php(bill.amount)}[/bold]")
    console.print(f"  Consumption: {bill.consumption:g} m³")
    console.print(f"  Due Date: {format_date(bill.due_date)}")
    console.print(f"  Status: {_status_label(bill)}")
    if bill.discount_clamped:
        console.print("  [yellow]The discount on this bill was limited to the current charges.[/yellow]")
    if bill.is_paid:
        console.print(f"  Paid on {format_date(bill.payment_date)} via {bill.payment_method.value if bill.payment_method else 'N/A'}")
        if bill.payment_reference:
            console.print(f"  Reference: {bill.payment_reference}")


def dashboard_menu(profile: AccountProfile, ledger: BillLedger) -> AccountOverview:
    overview = AccountOverview(ledger, profile)
    overview.refresh()

    console.print()
    console.print(f"[bold]Welcome, {profile.greeting_name}![/bold]", style="cyan")
    if overview.error:
        console.print(f"[red]{overview.error}[/red]")
    for message in overview.pricing_errors:
        console.print(f"[yellow]{message}[/yellow]")

    summary = Table(show_header=False)
    summary.add_column("Field")
    summary.add_column("Value")
    summary.add_row("Account Status", profile.account_status or "Active")
    balance_style = "red" if overview.current_balance > 0 else "green"
    summary.add_row("Current Balance", f"[{balance_style}]{format_php(overview.current_balance)}[/{balance_style}]")
    if overview.current_balance > 0 and overview.next_due_date is not None:
        summary.add_row("Next Due", format_date(overview.next_due_date))
    elif overview.current_balance == 0:
        summary.add_row("", "All bills settled!")
    summary.add_row("Account Number", profile.account_number or "N/A")
    summary.add_row("Service Type", profile.service_type or "Residential")
    console.print(summary)

    if overview.recent_bills:
        console.print("[bold]Recent Bills[/bold]")
        console.print(_bills_table(overview.recent_bills))
    else:
        console.print("[dim]No bills yet.[/dim]")
    return overview


def pay_bill_menu(bill: Bill, ledger: BillLedger) -> Bill | None:
    """Walk a bill through method selection and payment. Returns the paid bill."""
    try:
        flow = PaymentConfirmationFlow(ledger, bill)
    except AlreadyPaid as e:
        console.print(f"[yellow]{e}[/yellow]")
        return None

    console.print()
    console.print(f"[bold]Pay Bill: {format_period(flow.billing_period)}[/bold]", style="cyan")
    console.print(f"  Amount to pay: [bold]{format_php(flow.amount)}[/bold]")

    while True:
        method = questionary.select(
            "Payment method",
            choices=[m.value for m in PaymentMethod] + [CANCEL],
            default=flow.selected_method.value if flow.selected_method else None,
        ).ask()
        if method is None or method == CANCEL:
            flow.close()
            return None
        flow.select_method(method)

        confirmed = questionary.confirm(f"Pay {format_php(flow.amount)} via {method}?", default=True).ask()
        if not confirmed:
            flow.close()
            return None

        try:
            with console.status("Processing payment..."):
                paid = flow.submit()
        except LedgerError as e:
            console.print(f"[red]{e}[/red]")
            return None
        except DataUnavailable as e:
            console.print(f"[red]{e}[/red]")
            if questionary.confirm("Try again?", default=True).ask():
                flow.retry()
                continue
            flow.close()
            return None

        console.print("[green bold]Payment successful![/green bold]")
        console.print(f"  Reference: {paid.payment_reference}")
        return paid


def explain_bill_menu(bill: Bill, profile: AccountProfile, assistant_service: AssistantService) -> None:
    console.print()
    console.print(f"[bold]Explanation for {format_period(bill.billing_period)} Bill[/bold]", style="cyan")
    with console.status(f"{settings.assistant_name} is analyzing your bill..."):
        explanation = assistant_service.explain_bill(bill, profile)
    console.print(Markdown(explanation))


def _bill_actions_menu(
    bill: Bill, profile: AccountProfile, ledger: BillLedger, assistant_service: AssistantService
) -> None:
    while True:
        _show_bill_detail(bill)
        choices = ["Explain Bill", BACK]
        if not bill.is_paid:
            choices.insert(0, "Pay Bill")

        action = questionary.select("Action", choices=choices).ask()
        if action is None or action == BACK:
            return
        elif action == "Pay Bill":
            if pay_bill_menu(bill, ledger) is not None:
                return
        elif action == "Explain Bill":
            explain_bill_menu(bill, profile, assistant_service)


def list_bills_menu(profile: AccountProfile, ledger: BillLedger, assistant_service: AssistantService) -> None:
    if profile.id is None:
        raise ValueError("Profile must have an id")

    shown: list[Bill] = []
    while True:
        try:
            bills = ledger.list_bills(profile.id)
        except DataUnavailable as e:
            console.print(f"[red]{e}[/red]")
            if not shown:
                return
            console.print("[dim]Showing the last loaded bills.[/dim]")
        else:
            priced = ledger.price_bills(bills, profile)
            for message in priced.errors:
                console.print(f"[yellow]{message}[/yellow]")
            shown = priced.bills
            if not shown:
                console.print("[yellow]No bills found.[/yellow]")
                return

        console.print()
        console.print(_bills_table(shown))
        choices = [questionary.Choice(title=_bill_label(b), value=b) for b in shown]
        choice = questionary.select("Select a bill", choices=[*choices, BACK]).ask()
        if choice is None or choice == BACK:
            return
        _bill_actions_menu(choice, profile, ledger, assistant_service)
