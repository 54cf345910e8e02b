from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from waterdesk.constants import CUSTOMER_ISSUE_TYPES, format_date
from waterdesk.exceptions import DataUnavailable, ValidationRejected
from waterdesk.models.customer import AccountProfile
from waterdesk.models.ticket import SupportTicket
from waterdesk.services.ticket_service import TicketService

console = Console()


def report_issue_menu(profile: AccountProfile, ticket_service: TicketService) -> SupportTicket | None:
    console.print()
    console.print("[bold]Report an Issue[/bold]", style="cyan")

    form = ticket_service.start_report(profile)
    if form.from_chat:
        console.print("[dim]The description below was drafted from your chat. Review it before submitting.[/dim]")

    issue_type = questionary.select(
        "Issue type",
        choices=CUSTOMER_ISSUE_TYPES,
        default=form.issue_type or None,
    ).ask()
    if issue_type is None:
        return None

    description = questionary.text("Description:", default=form.description, multiline=True).ask()
    if description is None:
        return None

    address = questionary.text("Location of the issue:", default=form.issue_address).ask()
    if address is None:
        return None

    form = form.model_copy(update={"issue_type": issue_type, "description": description, "issue_address": address})
    try:
        ticket = ticket_service.submit(profile, form)
    except (ValidationRejected, DataUnavailable) as e:
        console.print(f"[red]{e}[/red]")
        return None

    console.print("[green bold]Support ticket submitted successfully![/green bold]")
    console.print(f"  Ticket ID: {ticket.uuid or ticket.id}")
    return ticket


def list_tickets_menu(profile: AccountProfile, ticket_service: TicketService) -> None:
    try:
        tickets = ticket_service.list_tickets(profile)
    except DataUnavailable as e:
        console.print(f"[red]{e}[/red]")
        return

    if not tickets:
        console.print("[yellow]You have not submitted any tickets.[/yellow]")
        return

    table = Table(title="My Tickets")
    table.add_column("Submitted")
    table.add_column("Issue Type")
    table.add_column("Status", justify="center")
    table.add_column("Description")
    for ticket in tickets:
        summary = ticket.description.splitlines()[0] if ticket.description else ""
        table.add_row(format_date(ticket.submitted_at), ticket.issue_type, ticket.status, summary[:60])
    console.print(table)
