"""Click CLI: config loading, provider wiring, team chat, summaries."""

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.logging import RichHandler

from config.config_loader import AppConfig, load_config
from mindmate.healthcheck import run_health_checks
from mindmate.models import MODE_INSIDE_OUT, MODE_STANDARD
from mindmate.orchestrator import DebateOrchestrator
from mindmate.output import console, print_chat_result, print_health, print_history, print_summary
from mindmate.providers.base import AIProvider, ProviderError
from mindmate.providers.gemini import GeminiProvider
from mindmate.providers.mistral import MistralProvider
from mindmate.store import JsonChatStore, PersistenceError
from mindmate.team_chat import ConversationNotFoundError, TeamChatService

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "gemini": GeminiProvider,
    "mistral": MistralProvider,
}

_MODES = {
    "inside-out": MODE_INSIDE_OUT,
    "standard": MODE_STANDARD,
}


@dataclass
class CliState:
    config: AppConfig
    db_path: Path


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _build_provider(config: AppConfig, name: str) -> AIProvider:
    """Instantiate the named model. Raises ProviderError if it cannot be used."""
    if name not in PROVIDER_CLASSES or name not in config.models:
        raise ProviderError(name, "Unknown provider")
    if name not in config.available_providers:
        raise ProviderError(name, f"No API key set ({config.models[name].api_key_env})")
    return PROVIDER_CLASSES[name](config.models[name])


def _build_all_providers(config: AppConfig) -> dict[str, AIProvider]:
    """Build every available provider. Returns dict keyed by name."""
    providers: dict[str, AIProvider] = {}
    for name in sorted(config.available_providers):
        try:
            providers[name] = _build_provider(config, name)
        except ProviderError as exc:
            logger.warning("Failed to instantiate provider '%s': %s", name, exc)
    return providers


def _build_service(state: CliState, turns: int | None = None) -> TeamChatService:
    defaults = state.config.defaults
    provider = _build_provider(state.config, defaults.agent_model)
    summary_provider = (
        provider
        if defaults.summary_model == defaults.agent_model
        else _build_provider(state.config, defaults.summary_model)
    )
    orchestrator = DebateOrchestrator(
        provider=provider,
        prompts=state.config.prompts,
        debate_turns=turns if turns is not None else defaults.debate_turns,
        history_window=defaults.history_window,
        temperature=defaults.agent_temperature,
    )
    return TeamChatService(
        store=JsonChatStore(state.db_path),
        orchestrator=orchestrator,
        provider=provider,
        summary_provider=summary_provider,
        prompts=state.config.prompts,
        agent_temperature=defaults.agent_temperature,
        summary_temperature=defaults.summary_temperature,
    )


def _build_summary_service(state: CliState) -> TeamChatService:
    """Service for summarizing stored conversations. Only the summary model is built."""
    defaults = state.config.defaults
    provider = _build_provider(state.config, defaults.summary_model)
    orchestrator = DebateOrchestrator(provider=provider, prompts=state.config.prompts, debate_turns=0)
    return TeamChatService(
        store=JsonChatStore(state.db_path),
        orchestrator=orchestrator,
        provider=provider,
        summary_provider=provider,
        prompts=state.config.prompts,
        summary_temperature=defaults.summary_temperature,
    )


def _fail(label: str, exc: Exception) -> None:
    console.print(f"[bold red]{label}:[/bold red] {exc}")
    sys.exit(1)


@click.group()
@click.option("--db", "db_path", default=None, type=click.Path(dir_okay=False, path_type=Path),
              help="Chat store JSON file (default: from config)")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.pass_context
def main(ctx: click.Context, db_path: Path | None, verbose: bool) -> None:
    """MindMate team chat -- Inside Out emotion debate and summaries.

    \b
    Examples:
      mindmate chat "I lost my job today"
      mindmate chat "I still feel stuck" -c 3f1c...
      mindmate chat "Rough week" --mode standard
      mindmate summarize 3f1c...
      mindmate history 3f1c...
      mindmate check
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        _fail("Config error", exc)

    ctx.obj = CliState(config=config, db_path=db_path or config.defaults.db_path)


@main.command()
@click.argument("text")
@click.option("-c", "--conversation", "conversation_id", default=None,
              help="Continue an existing conversation (default: start a new one)")
@click.option("--mode", default="inside-out", show_default=True,
              type=click.Choice(list(_MODES), case_sensitive=False),
              help="inside-out (emotion debate) or standard (Listener -> Coordinator)")
@click.option("--turns", default=None, type=click.IntRange(min=0),
              help="Debate turns per message (default: from config)")
@click.pass_obj
def chat(state: CliState, text: str, conversation_id: str | None, mode: str, turns: int | None) -> None:
    """Send TEXT to the AI team and print the replies."""
    try:
        service = _build_service(state, turns)
        result = asyncio.run(service.send_message(text, conversation_id=conversation_id, mode=_MODES[mode.lower()]))
    except ValueError as exc:
        _fail("Invalid message", exc)
    except ProviderError as exc:
        _fail("Model error", exc)
    except PersistenceError as exc:
        _fail("Storage error", exc)

    print_chat_result(result)
    console.print(f"\n[dim]Conversation: {result.conversation_id}[/dim]")


@main.command()
@click.argument("conversation_id")
@click.pass_obj
def summarize(state: CliState, conversation_id: str) -> None:
    """Summarize a conversation into a summary and advice."""
    try:
        service = _build_summary_service(state)
        result = asyncio.run(service.summarize_conversation(conversation_id))
    except ConversationNotFoundError as exc:
        _fail("Not found", exc)
    except ProviderError as exc:
        _fail("Model error", exc)
    except PersistenceError as exc:
        _fail("Storage error", exc)

    print_summary(conversation_id, result)


@main.command()
@click.argument("conversation_id")
@click.pass_obj
def history(state: CliState, conversation_id: str) -> None:
    """Print the stored messages of a conversation."""
    try:
        messages = JsonChatStore(state.db_path).load_history(conversation_id)
    except PersistenceError as exc:
        _fail("Storage error", exc)

    print_history(conversation_id, messages)


@main.command()
@click.pass_obj
def check(state: CliState) -> None:
    """Ping every configured model that has an API key."""
    providers = _build_all_providers(state.config)
    if not providers:
        _fail("Error", RuntimeError("No providers available. Check API keys in .env."))

    console.print("\n[bold]Checking providers...[/bold]")
    results = asyncio.run(run_health_checks(providers.values()))
    print_health(results)

    if not all(r.ok for r in results):
        sys.exit(1)


if __name__ == "__main__":
    main()
