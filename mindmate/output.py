"""Rich console rendering for team-chat replies, history and summaries."""

from collections.abc import Sequence
from datetime import datetime

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from mindmate.healthcheck import ProviderHealth
from mindmate.models import StoredMessage, SummaryResult, TeamChatResult
from mindmate.personas import get_persona

console = Console(legacy_windows=False)

# Persona name -> border colour
_PERSONA_STYLES = {
    "Joy": "yellow",
    "Sadness": "blue",
    "Anger": "red",
    "Fear": "magenta",
    "Disgust": "green",
}


def _message_title(message: StoredMessage) -> str:
    if message.is_user:
        return "[bold]You[/bold]"
    name = message.agent_name or "AI"
    marker = message.avatar
    if marker is None:
        persona = get_persona(name)
        marker = persona.display_marker if persona else None
    return f"{marker} [bold]{name}[/bold]" if marker else f"[bold]{name}[/bold]"


def _message_panel(message: StoredMessage) -> Panel:
    style = "white" if message.is_user else _PERSONA_STYLES.get(message.agent_name or "", "cyan")
    stamp = datetime.fromtimestamp(message.timestamp / 1000).strftime("%H:%M:%S")
    return Panel(
        Text(message.text),
        title=_message_title(message),
        subtitle=stamp,
        title_align="left",
        border_style=style,
    )


def print_messages(messages: Sequence[StoredMessage], out: Console | None = None) -> None:
    out = out or console
    for message in messages:
        out.print(_message_panel(message))


def print_chat_result(result: TeamChatResult, out: Console | None = None) -> None:
    """Print the AI replies to one user message."""
    out = out or console
    out.print(Rule(f"[bold cyan]Conversation {result.conversation_id}[/bold cyan]"))
    print_messages(result.replies, out)


def print_history(conversation_id: str, messages: Sequence[StoredMessage], out: Console | None = None) -> None:
    out = out or console
    out.print(Rule(f"[bold cyan]History: {conversation_id}[/bold cyan] ({len(messages)} messages)"))
    if not messages:
        out.print(Text("No messages yet.", style="dim"))
        return
    print_messages(sorted(messages, key=lambda m: m.timestamp), out)


def print_summary(conversation_id: str, result: SummaryResult, out: Console | None = None) -> None:
    out = out or console
    out.print(Rule("[bold green]Inside Out Summary[/bold green]"))
    out.print(Text(f"Conversation: {conversation_id}", style="dim"))
    out.print(Panel(Markdown(result.summary), title="[bold]Summary[/bold]", border_style="green"))
    out.print(Panel(Markdown(result.advice), title="[bold]Advice[/bold]", border_style="cyan"))


def print_health(results: Sequence[ProviderHealth], out: Console | None = None) -> None:
    out = out or console
    for health in results:
        if health.ok:
            out.print(f"  [green]OK  [/green] {health.name} ({health.model}) {health.latency_sec:.1f}s")
        else:
            short_err = health.error.splitlines()[0][:120] if health.error else "unknown error"
            out.print(f"  [red]FAIL[/red] {health.name}: {short_err}")
