import questionary
from rich.console import Console
from rich.markdown import Markdown

from waterdesk.cli.bill_menu import dashboard_menu, list_bills_menu
from waterdesk.cli.chat_menu import chat_menu
from waterdesk.cli.ticket_menu import list_tickets_menu, report_issue_menu
from waterdesk.exceptions import DataUnavailable
from waterdesk.models.customer import AccountProfile
from waterdesk.oracle.factory import get_oracle
from waterdesk.repositories.base import CustomerRepository
from waterdesk.repositories.factory import (
    get_bill_repository,
    get_customer_repository,
    get_ticket_repository,
)
from waterdesk.services.assistant_service import AssistantService
from waterdesk.services.conversation_service import ConversationOrchestrator
from waterdesk.services.handoff_service import EscalationHandoff
from waterdesk.services.ledger_service import BillLedger
from waterdesk.services.ticket_service import TicketService
from waterdesk.settings import settings
from waterdesk.staging.factory import get_staging_area

console = Console()

EXIT = "Exit"
SWITCH_ACCOUNT = "Switch Account"


def _build_services() -> tuple[
    CustomerRepository, BillLedger, ConversationOrchestrator, TicketService, AssistantService
]:
    oracle = get_oracle()
    handoff = EscalationHandoff(get_staging_area())
    return (
        get_customer_repository(),
        BillLedger(get_bill_repository()),
        ConversationOrchestrator(oracle, handoff),
        TicketService(get_ticket_repository(), handoff),
        AssistantService(oracle),
    )


def _account_label(profile: AccountProfile) -> str:
    return f"{profile.account_number} - {profile.greeting_name}"


def water_saving_tips_menu(profile: AccountProfile, assistant_service: AssistantService) -> None:
    console.print()
    console.print("[bold]Water Saving Tips[/bold]", style="cyan")
    with console.status(f"{settings.assistant_name} is thinking..."):
        tips = assistant_service.water_saving_tips(profile)
    console.print(Markdown(tips))


def account_menu(
    profile: AccountProfile,
    ledger: BillLedger,
    orchestrator: ConversationOrchestrator,
    ticket_service: TicketService,
    assistant_service: AssistantService,
) -> None:
    while True:
        console.print()
        choice = questionary.select(
            f"Account {profile.account_number}",
            choices=[
                "Dashboard",
                "My Bills",
                f"Chat with {settings.assistant_name}",
                "Report an Issue",
                "My Tickets",
                "Water Saving Tips",
                SWITCH_ACCOUNT,
            ],
        ).ask()

        if choice is None or choice == SWITCH_ACCOUNT:
            return
        elif choice == "Dashboard":
            dashboard_menu(profile, ledger)
        elif choice == "My Bills":
            list_bills_menu(profile, ledger, assistant_service)
        elif choice == f"Chat with {settings.assistant_name}":
            escalation = chat_menu(profile, orchestrator)
            if escalation is not None:
                console.print(f"[green]{escalation.notice}[/green]")
                report_issue_menu(profile, ticket_service)
        elif choice == "Report an Issue":
            report_issue_menu(profile, ticket_service)
        elif choice == "My Tickets":
            list_tickets_menu(profile, ticket_service)
        elif choice == "Water Saving Tips":
            water_saving_tips_menu(profile, assistant_service)


def main_menu() -> None:
    customer_repo, ledger, orchestrator, ticket_service, assistant_service = _build_services()

    console.print()
    console.print(f"[bold]{settings.utility_name} Customer Desk[/bold]", style="cyan")
    console.print()

    while True:
        try:
            profiles = customer_repo.list_all()
        except DataUnavailable as e:
            console.print(f"[red]{e}[/red]")
            return
        if not profiles:
            console.print("[yellow]No customer accounts found. Run the seed script first.[/yellow]")
            return

        choices = [questionary.Choice(title=_account_label(p), value=p) for p in profiles]
        choice = questionary.select("Choose an account", choices=[*choices, EXIT]).ask()

        if choice is None or choice == EXIT:
            console.print("[bold]Goodbye![/bold]")
            break
        account_menu(choice, ledger, orchestrator, ticket_service, assistant_service)
