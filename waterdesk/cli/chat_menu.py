from __future__ import annotations

import questionary
from rich.console import Console

from waterdesk.models.chat import ChatMessage, ChatRole
from waterdesk.models.customer import AccountProfile
from waterdesk.services.conversation_service import ConversationOrchestrator, EscalationResult

console = Console()

EXIT_COMMANDS = {"/exit", "/quit"}
TICKET_COMMAND = "/ticket"


def _print_message(message: ChatMessage, orchestrator: ConversationOrchestrator, profile: AccountProfile) -> None:
    if message.role == ChatRole.USER:
        console.print(f"[bold]{profile.display_name or 'You'}:[/bold] {message.text}")
    else:
        console.print(f"[bold cyan]{orchestrator.assistant_name}:[/bold cyan] {message.text}")


def chat_menu(profile: AccountProfile, orchestrator: ConversationOrchestrator) -> EscalationResult | None:
    """Run a conversation until the user leaves or accepts a support ticket."""
    session = orchestrator.open(profile)
    console.print()
    console.print(f"[bold]Chat with {orchestrator.assistant_name}[/bold]", style="cyan")
    console.print("[dim]Type /exit to leave.[/dim]")
    for message in session.messages:
        _print_message(message, orchestrator, profile)

    while True:
        suggestions = orchestrator.suggestions()
        if suggestions:
            console.print(f"[dim]Try: {' | '.join(suggestions)}[/dim]")
        if orchestrator.escalation_offered:
            console.print(f"[yellow]Type {TICKET_COMMAND} to create a support ticket from this chat.[/yellow]")

        text = questionary.text("You:").ask()
        if text is None or text.strip().lower() in EXIT_COMMANDS:
            orchestrator.close()
            return None
        if text.strip().lower() == TICKET_COMMAND and orchestrator.escalation_offered:
            return orchestrator.escalate()

        with console.status(f"{orchestrator.assistant_name} is typing..."):
            reply = orchestrator.submit(text)
        if reply is None:
            continue
        if session.error:
            console.print(f"[red]{session.error}[/red]")
            orchestrator.dismiss_error()
        _print_message(reply, orchestrator, profile)
