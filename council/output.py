"""Rich console output for participants, selections and replies."""

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from config.config_loader import TopicConfig
from council.models import ParticipantSummary, SelectionResult, StoryAnalysis


console = Console(legacy_windows=False)


def _preview(text: str, words: int = 50) -> str:
    """Return first N words of a text."""
    all_words = text.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def participants_table(participants: list[ParticipantSummary]) -> Table:
    table = Table(title="Participants", show_lines=False)
    table.add_column("", style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Role")
    table.add_column("Specialty", style="dim")
    for p in participants:
        table.add_row(p.avatar, p.id, p.name, p.role, p.specialty)
    return table


def print_participants(participants: list[ParticipantSummary]) -> None:
    console.print(participants_table(participants))


def print_topics(topics: dict[str, TopicConfig]) -> None:
    table = Table(title="Topics")
    table.add_column("ID", style="cyan")
    table.add_column("Description")
    table.add_column("Key points", style="dim")
    for topic in topics.values():
        table.add_row(topic.id, topic.description, ", ".join(topic.key_points))
    console.print(table)


def print_selection(result: SelectionResult) -> None:
    """Print the score breakdown behind a selection."""
    console.print(Rule(f"[bold cyan]Selected {result.participant_id}[/bold cyan] ({result.reason})"))
    scores = "  ".join(
        f"[bold]{s.participant_id}[/bold]={s.score:.1f}" if s.participant_id == result.participant_id
        else f"{s.participant_id}={s.score:.1f}"
        for s in result.scores
    )
    console.print(Text.from_markup(scores, style="dim"))


def print_reply(name: str, role: str, text: str, fallback: bool = False, follow_up: bool = False) -> None:
    """Print a participant reply as a panel of Rich markdown."""
    title = f"[bold]{name}[/bold] ({role})"
    if follow_up:
        title += " [dim]follow-up[/dim]"
    console.print(
        Panel(
            Markdown(text),
            title=title,
            subtitle="fallback" if fallback else None,
            border_style="yellow" if fallback else "green",
        )
    )


def print_moderation(approved: bool, severity: str, reasons: list[str], fallback: bool) -> None:
    verdict = "[green]approved[/green]" if approved else "[red]rejected[/red]"
    suffix = " [dim](default, moderation unavailable)[/dim]" if fallback else ""
    console.print(f"Moderation: {verdict} severity={severity}{suffix}")
    for reason in reasons:
        console.print(f"  - {_preview(reason, words=30)}")


def print_analysis(analysis: StoryAnalysis) -> None:
    """Print a story analysis as a two-column table."""
    table = Table(title="Story analysis", show_header=False)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("Themes", ", ".join(analysis.themes) or "-")
    table.add_row("Sentiment", f"{analysis.sentiment} ({analysis.sentiment_confidence:.2f})")
    table.add_row("Community tags", ", ".join(analysis.community_tags) or "-")
    table.add_row("Resources", ", ".join(analysis.recommended_resources) or "-")
    review = "[red]needs review[/red]" if analysis.needs_review else "[green]ok[/green]"
    if analysis.review_reasons:
        review += ": " + "; ".join(analysis.review_reasons)
    table.add_row("Moderation", review)
    console.print(table)
    if analysis.fallback:
        console.print("[dim](empty analysis, provider unavailable)[/dim]")
