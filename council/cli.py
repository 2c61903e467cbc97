"""Click CLI: list participants, ask the council a question, check providers, serve HTTP."""

import asyncio
import logging
import sys

import click
from dotenv import load_dotenv
from rich.logging import RichHandler

from config.config_loader import AppConfig, ConfigError, load_config
from council.healthcheck import run_health_checks
from council.models import ConversationContext
from council.output import (
    console,
    print_analysis,
    print_moderation,
    print_participants,
    print_reply,
    print_selection,
    print_topics,
)
from council.registry import ParticipantNotFoundError
from council.service import CouncilService, build_all_providers, build_provider, build_service

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _load_or_exit() -> AppConfig:
    try:
        return load_config()
    except (FileNotFoundError, ConfigError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)


def _service_or_exit(config: AppConfig, provider_name: str | None) -> CouncilService:
    try:
        return build_service(config, provider=build_provider(config, provider_name))
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)


async def _ask(
    service: CouncilService,
    message: str,
    context: ConversationContext,
    participant_id: str | None,
    with_follow_up: bool,
    show_scores: bool,
) -> None:
    if participant_id is None:
        selection = service.engine.select(message, context)
        if show_scores:
            print_selection(selection)
        participant_id = selection.participant_id

    reply = await service.chat(message, context, history=[], participant_id=participant_id)
    participant = service.registry.get(reply.participant_id)
    print_reply(participant.name, participant.role, reply.response, fallback=reply.fallback)

    if with_follow_up:
        result = await service.follow_up(message, reply.response, context, reply.participant_id)
        if result is not None:
            other = service.registry.get(result.participant_id)
            print_reply(other.name, other.role, result.text, fallback=result.fallback, follow_up=True)


@click.group()
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(verbose: bool) -> None:
    """Commons Council -- route questions to specialist AI participants.

    \b
    Examples:
      python -m council.cli participants
      python -m council.cli ask "What policy changes would help?" --follow-up
      python -m council.cli ask "Should we print our own money?" --topic monetary-reform
      python -m council.cli serve --port 3000
    """
    load_dotenv()
    _setup_logging(verbose)


@main.command()
def participants() -> None:
    """List the configured participants."""
    config = _load_or_exit()
    service = _service_or_exit(config, None)
    print_participants(service.registry.all())


@main.command()
def topics() -> None:
    """List the topic catalog."""
    config = _load_or_exit()
    print_topics(config.topics)


@main.command()
@click.argument("message")
@click.option("--topic", default=None, help="Topic id (e.g. monetary-reform)")
@click.option("--mode", default="discussion", show_default=True, help="Discussion mode label")
@click.option("--participant", "participant_id", default=None, help="Bypass selection and ask this participant")
@click.option("--follow-up", "with_follow_up", is_flag=True, help="Also ask a different participant to follow up")
@click.option("--provider", "provider_name", default=None, help="Provider name (default: from config)")
@click.option("--scores", "show_scores", is_flag=True, help="Show the selection score breakdown")
def ask(
    message: str,
    topic: str | None,
    mode: str,
    participant_id: str | None,
    with_follow_up: bool,
    provider_name: str | None,
    show_scores: bool,
) -> None:
    """Ask the council a single MESSAGE."""
    config = _load_or_exit()
    service = _service_or_exit(config, provider_name)
    context = ConversationContext(topic=topic, mode=mode)
    try:
        asyncio.run(_ask(service, message, context, participant_id, with_follow_up, show_scores))
    except ParticipantNotFoundError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)


@main.command()
@click.argument("content")
@click.option("--type", "content_type", default="message", show_default=True, help="Content type label")
def moderate(content: str, content_type: str) -> None:
    """Run moderation on CONTENT."""
    config = _load_or_exit()
    service = _service_or_exit(config, None)
    result = asyncio.run(service.moderate(content, content_type))
    print_moderation(result.approved, result.severity, result.reasons, result.fallback)


@main.command()
@click.argument("content")
def analyze(content: str) -> None:
    """Analyze a story CONTENT for themes, sentiment and resources."""
    config = _load_or_exit()
    service = _service_or_exit(config, None)
    print_analysis(asyncio.run(service.analyze_story(content)))


@main.command()
def health() -> None:
    """Ping every provider that has an API key."""
    config = _load_or_exit()
    providers = build_all_providers(config)
    if not providers:
        console.print("[bold red]Error:[/bold red] No providers available. Check API keys in .env.")
        sys.exit(1)

    console.print("\n[bold]Checking providers...[/bold]")
    results = asyncio.run(run_health_checks(providers))
    failed = 0
    for name in sorted(results):
        ok, err = results[name]
        if ok:
            console.print(f"  [green]OK  [/green] {name}")
        else:
            failed += 1
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            console.print(f"  [red]FAIL[/red] {name}: {short_err}")
    if failed == len(results):
        sys.exit(1)


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=3000, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from council.api import create_app

    config = _load_or_exit()
    service = _service_or_exit(config, None)
    uvicorn.run(create_app(service), host=host, port=port)


if __name__ == "__main__":
    main()
