"""Command-line interface for the thought pipeline."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from thought_pipeline.config import load_config, merge_cli_overrides
from thought_pipeline.drafts.analytics import compute_draft_stats
from thought_pipeline.errors import PipelineError
from thought_pipeline.feed.ranking import browse_topics, rank_feed
from thought_pipeline.topics.models import Topic
from thought_pipeline.topics.similarity import find_similar
from thought_pipeline.workspace import Workspace

app = typer.Typer(
    name="thought-pipeline",
    help="Curate scouted topics and turn voice notes into drafts.",
)
batch_app = typer.Typer(help="Record several voice notes, then process them together.")
app.add_typer(batch_app, name="batch")

console = Console()

# Set by the main callback; commands build their workspace from it
_workspace_factory: Callable[[], Workspace] | None = None


def _workspace() -> Workspace:
    if _workspace_factory is None:
        return Workspace(load_config())
    return _workspace_factory()


@contextmanager
def _errors() -> Iterator[None]:
    """Render pipeline errors as a red message and exit code 1."""
    try:
        yield
    except PipelineError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc


def _topic_table(topics: list[Topic], title: str, workspace: Workspace) -> Table:
    prefs = workspace.preferences.read()
    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Source", style="dim")
    table.add_column("Status", style="green")
    for topic in topics:
        status = prefs.status_of(topic.id)
        table.add_row(topic.id, topic.title, topic.source, status.value if status else "")
    return table


@app.callback()
def main(
    config: Annotated[
        Optional[Path], typer.Option("--config", "-c", help="Path to a TOML config file.")
    ] = None,
    data_dir: Annotated[
        Optional[str], typer.Option("--data-dir", help="Override the storage directory.")
    ] = None,
    scout_dir: Annotated[
        Optional[str], typer.Option("--scout-dir", help="Override the scout directory.")
    ] = None,
    model: Annotated[Optional[str], typer.Option("--model", help="Claude model.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Debug logging.")] = False,
) -> None:
    """Thought Pipeline - curate topics and draft posts from voice notes."""
    global _workspace_factory

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    def factory() -> Workspace:
        cfg = merge_cli_overrides(
            load_config(config), data_dir=data_dir, scout_dir=scout_dir, model=model
        )
        return Workspace(cfg)

    _workspace_factory = factory


# ── Topics ──────────────────────────────────────────────────────────


@app.command()
def topics() -> None:
    """Show the ranked feed (interested first, recorded last)."""
    ws = _workspace()
    ranked = rank_feed(ws.catalog.all_topics(), ws.preferences.read())
    console.print(_topic_table(ranked, "Feed", ws))


@app.command()
def browse() -> None:
    """List every topic that has not been deleted."""
    ws = _workspace()
    listed = browse_topics(ws.catalog.all_topics(), ws.preferences.read())
    console.print(_topic_table(listed, "All topics", ws))


@app.command()
def mark(
    topic_id: str,
    status: Annotated[str, typer.Argument(help="skipped, interested, recorded or reset.")],
) -> None:
    """Set a topic's preference status."""
    with _errors():
        _workspace().preferences.set_status(topic_id, status)
    console.print(f"[green]{topic_id}[/green] -> {status}")


@app.command("delete-topic")
def delete_topic(topic_id: str) -> None:
    """Hide a topic permanently."""
    ws = _workspace()
    user_ids = {t.id for t in ws.catalog.user_topics()}
    with _errors():
        if topic_id in user_ids:
            ws.catalog.delete_user_topic(topic_id)
        else:
            ws.preferences.delete(topic_id)
    console.print(f"Deleted topic [cyan]{topic_id}[/cyan]")


@app.command()
def suggest(
    text: Annotated[Optional[str], typer.Option("--text", help="Topic idea as text.")] = None,
    audio: Annotated[
        Optional[Path], typer.Option("--audio", exists=True, help="Topic idea as a voice note.")
    ] = None,
) -> None:
    """Research an idea into a new user topic."""
    with _errors():
        topic = _workspace().catalog.suggest(text=text, audio_path=audio)
    console.print(f"[green]Added[/green] {topic.id}: {topic.title}")
    console.print(topic.summary)


@app.command()
def similar(topic_id: str) -> None:
    """Find topics related to TOPIC_ID."""
    ws = _workspace()
    with _errors():
        matches = find_similar(topic_id, ws.catalog.all_topics())
    if not matches:
        console.print("No related topics found.")
        return
    table = Table(title=f"Related to {topic_id}")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Score", justify="right")
    for match in matches:
        table.add_row(match.topic.id, match.topic.title, f"{match.score:.2f}")
    console.print(table)


@app.command()
def merge(
    topic_ids: Annotated[list[str], typer.Argument(help="Two or more topic ids.")],
    title: Annotated[Optional[str], typer.Option("--title")] = None,
) -> None:
    """Merge topics into a thread draft."""
    with _errors():
        draft = _workspace().writer.merge_topics(topic_ids, title=title)
    console.print(f"[green]Thread draft[/green] {draft.id}: {draft.topic_title}")
    console.print(draft.draft)


@app.command()
def speak(topic_id: str) -> None:
    """Generate (or reuse) the narration for a topic."""
    with _errors():
        path = _workspace().catalog.narrate(topic_id)
    console.print(f"Narration: {path}")


# ── Drafts ──────────────────────────────────────────────────────────


@app.command()
def record(
    topic_id: str,
    audio: Annotated[Path, typer.Argument(exists=True, dir_okay=False)],
    template: Annotated[str, typer.Option("--template", "-t")] = "default",
) -> None:
    """Transcribe a voice note and draft a post for TOPIC_ID."""
    with _errors():
        draft = _workspace().writer.record(topic_id, audio, template)
    console.print(f"[green]Draft[/green] {draft.id}")
    console.print(draft.draft)


@app.command()
def drafts() -> None:
    """List drafts, newest first."""
    table = Table(title="Drafts")
    table.add_column("ID", style="cyan")
    table.add_column("Topic")
    table.add_column("Template", style="dim")
    table.add_column("Created")
    for draft in _workspace().drafts.list():
        kind = "thread" if draft.is_thread else draft.template
        table.add_row(draft.id, draft.topic_title, kind, f"{draft.created_at:%Y-%m-%d %H:%M}")
    console.print(table)


@app.command()
def edit(draft_id: str, text: str) -> None:
    """Replace a draft's text (the old text is kept as a version)."""
    with _errors():
        _workspace().writer.edit(draft_id, text)
    console.print(f"Updated draft [cyan]{draft_id}[/cyan]")


@app.command()
def versions(draft_id: str) -> None:
    """Show the revision history of a draft."""
    history = _workspace().writer.versions(draft_id)
    if not history:
        console.print("No versions.")
        return
    for entry in history:
        console.print(f"[bold]v{entry.version}[/bold] {entry.created_at:%Y-%m-%d %H:%M}")
        console.print(entry.draft)
        console.print()


@app.command()
def restore(draft_id: str, version: int) -> None:
    """Restore a draft to an earlier version."""
    with _errors():
        _workspace().writer.restore(draft_id, version)
    console.print(f"Restored [cyan]{draft_id}[/cyan] to v{version}")


@app.command("delete-draft")
def delete_draft(draft_id: str) -> None:
    """Delete a draft and un-record its topic."""
    if _workspace().drafts.delete(draft_id):
        console.print(f"Deleted draft [cyan]{draft_id}[/cyan]")
    else:
        console.print(f"[yellow]No draft {draft_id}[/yellow]")


@app.command()
def schedule(
    draft_id: str,
    date: Annotated[str, typer.Argument(help="YYYY-MM-DD")],
    time: Annotated[str, typer.Argument(help="HH:MM")],
) -> None:
    """Schedule a draft for publishing (replaces any existing slot)."""
    with _errors():
        entry = _workspace().scheduler.schedule(draft_id, date, time)
    when = f"{entry.scheduled_date} {entry.scheduled_time}"
    console.print(f"Scheduled [cyan]{draft_id}[/cyan] for {when}")


@app.command()
def unschedule(draft_id: str) -> None:
    """Remove a draft's publish schedule."""
    _workspace().scheduler.unschedule(draft_id)
    console.print(f"Unscheduled [cyan]{draft_id}[/cyan]")


@app.command()
def due(
    mark_notified: Annotated[bool, typer.Option("--mark-notified")] = False,
) -> None:
    """List schedules that are due and not yet notified."""
    ws = _workspace()
    entries = ws.scheduler.due()
    if not entries:
        console.print("Nothing due.")
        return
    for entry in entries:
        when = f"{entry.scheduled_date} {entry.scheduled_time}"
        console.print(f"[bold]{entry.topic_title}[/bold] ({when})")
        console.print(entry.draft)
        if mark_notified:
            ws.scheduler.mark_notified(entry.draft_id)


@app.command()
def stats() -> None:
    """Drafting statistics: weekly counts, streak, templates."""
    result = compute_draft_stats(_workspace().drafts.list())
    console.print(f"Total drafts: [bold]{result.total_drafts}[/bold]")
    console.print(f"This week: {result.this_week}  Last week: {result.last_week}")
    console.print(f"Streak: {result.streak} day(s)")
    if result.most_productive_day:
        console.print(f"Most productive day: {result.most_productive_day}")
    for template, count in sorted(result.template_usage.items()):
        console.print(f"  {template}: {count}")


# ── Batch ───────────────────────────────────────────────────────────


@batch_app.command("start")
def batch_start() -> None:
    """Open a new batch session."""
    session = _workspace().batches.start()
    console.print(f"Batch session [cyan]{session.id}[/cyan]")


@batch_app.command("add")
def batch_add(
    session_id: str,
    topic_id: str,
    audio: Annotated[Path, typer.Argument(exists=True, dir_okay=False)],
) -> None:
    """Attach a voice note for TOPIC_ID to a batch session."""
    ws = _workspace()
    with _errors():
        topic = ws.catalog.find(topic_id)
        ref = ws.batches.add_recording(
            session_id,
            topic_id,
            topic.title if topic else topic_id,
            audio.read_bytes(),
            suffix=audio.suffix or ".webm",
        )
    console.print(f"Added recording [cyan]{ref.id}[/cyan]")


@batch_app.command("process")
def batch_process(session_id: str) -> None:
    """Transcribe and draft every recording in a session."""
    with _errors():
        _session, results = _workspace().batches.process(session_id)
    table = Table(title=f"Batch {session_id}")
    table.add_column("Topic")
    table.add_column("Result")
    for result in results:
        if result.success:
            outcome = f"[green]{result.draft_id}[/green]"
        else:
            outcome = f"[red]{result.error}[/red]"
        table.add_row(result.topic_title, outcome)
    console.print(table)


@batch_app.command("show")
def batch_show(session_id: str) -> None:
    """Show a batch session's recordings and status."""
    with _errors():
        session = _workspace().batches.require(session_id)
    console.print(f"Status: [bold]{session.status.value}[/bold]")
    for ref in session.recordings:
        console.print(f"  {ref.id}  {ref.topic_title}")


if __name__ == "__main__":
    app()
