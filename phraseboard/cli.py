"""Command-line interface for Phraseboard."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from phraseboard import __version__
from phraseboard.config import PhraseboardSettings, load_settings

app = typer.Typer(
    name="phraseboard",
    help="Transcript feedback phrases, aggregated into word clouds.",
    no_args_is_help=True,
)
console = Console(width=min(100, Console().width))

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Directory holding the database and uploads."),
]
LLMOption = Annotated[
    str | None,
    typer.Option("--llm", help="LLM provider: claude, chatgpt, ollama or offline."),
]


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"phraseboard {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version", "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Transcript feedback phrases, aggregated into word clouds."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _settings(data_dir: Path | None, llm: str | None = None) -> PhraseboardSettings:
    return load_settings(data_dir=data_dir, llm_provider=llm)


def _open_store(settings: PhraseboardSettings):  # type: ignore[no-untyped-def]
    """Open a session on the data dir's database; caller closes it."""
    from phraseboard.server.db import (
        create_session_factory,
        db_url_for_data_dir,
        get_engine,
        init_db,
    )
    from phraseboard.server.store import AnalysisStore

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    engine = get_engine(db_url_for_data_dir(settings.data_dir))
    init_db(engine)
    return AnalysisStore(create_session_factory(engine)())


def _ranked_table(title: str, ranked: dict[str, int], style: str) -> Table:
    table = Table(title=title, title_style=style, show_edge=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Term")
    table.add_column("Count", justify="right")
    for i, (term, count) in enumerate(ranked.items(), 1):
        table.add_row(str(i), term, str(count))
    return table


def _highlighted_text(phrase: str, term: str) -> Text:
    from phraseboard.phrases.selection import highlight

    before, match, after = highlight(phrase, term)
    text = Text(before)
    if match:
        text.append(match, style="bold black on yellow")
        text.append(after)
    return text


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def serve(
    port: Annotated[int, typer.Option("--port", "-p", help="Port to serve on.")] = 8160,
    data_dir: DataDirOption = None,
    llm: LLMOption = None,
    dev: Annotated[
        bool,
        typer.Option("--dev", help="Development mode: auto-reload and database browser."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Run the web app: upload page, word clouds and chat API."""
    import uvicorn

    url = f"http://127.0.0.1:{port}/results"
    console.print(f"\n  Results: [bold cyan]{url}[/bold cyan]\n")

    if dev:
        # In dev mode uvicorn uses a string factory and calls create_app()
        # itself (needed for reload). Stash options in the environment so
        # the factory can recover them.
        import os

        if data_dir is not None:
            os.environ["_PHRASEBOARD_DATA_DIR"] = str(data_dir.resolve())
        if llm is not None:
            os.environ["_PHRASEBOARD_LLM"] = llm
        os.environ["_PHRASEBOARD_DEV"] = "1"
        if verbose:
            os.environ["_PHRASEBOARD_VERBOSE"] = "1"

        uvicorn.run(
            "phraseboard.server.app:create_app",
            host="127.0.0.1",
            port=port,
            reload=True,
            factory=True,
            log_level="info" if verbose else "warning",
        )
    else:
        from phraseboard.server.app import create_app

        settings = _settings(data_dir, llm)
        app_instance = create_app(data_dir=settings.data_dir, verbose=verbose, settings=settings)
        uvicorn.run(
            app_instance,
            host="127.0.0.1",
            port=port,
            log_level="info" if verbose else "warning",
        )


@app.command()
def ingest(
    files: Annotated[
        list[Path],
        typer.Argument(help="Transcript .txt files to analyse.", exists=True, dir_okay=False),
    ],
    data_dir: DataDirOption = None,
    llm: LLMOption = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Analyse transcript files and add them to the store."""
    from phraseboard.llm.client import LLMClient
    from phraseboard.logging import setup_logging
    from phraseboard.server.ingest import AnalysisFailed, decode_transcript, ingest_transcript
    from phraseboard.server.storage import BlobStore

    settings = _settings(data_dir, llm)
    setup_logging(data_dir=settings.data_dir, verbose=verbose)
    try:
        client = LLMClient(settings)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    blobs = BlobStore(settings.data_dir / "uploads")
    store = _open_store(settings)

    # One event loop for every file: the SDK clients hold loop-bound connections
    async def _ingest_all() -> int:
        failures = 0
        for path in files:
            data = path.read_bytes()
            url = blobs.put(path.name, data)
            try:
                result = await ingest_transcript(
                    store, client, decode_transcript(data), path.name, url
                )
            except AnalysisFailed as exc:
                failures += 1
                console.print(f"[red]✗[/red] {path.name}: {exc}")
                continue
            console.print(
                f"[green]✓[/green] {path.name} → analysis #{result.analysis_id} "
                f"({len(result.analysis.positive_phrases)} positive, "
                f"{len(result.analysis.negative_phrases)} negative)"
            )
        return failures

    try:
        failures = asyncio.run(_ingest_all())
    finally:
        store.db.close()

    if client.tracker.calls:
        console.print(
            f"[dim]{client.tracker.calls} LLM calls, "
            f"{client.tracker.total_tokens:,} tokens[/dim]"
        )
    if failures:
        raise typer.Exit(1)


@app.command(name="import-json")
def import_json(
    source: Annotated[
        Path,
        typer.Argument(help="JSON array of analyses to import.", exists=True, dir_okay=False),
    ],
    data_dir: DataDirOption = None,
) -> None:
    """Import analyses exported as JSON (e.g. from an older database).

    Each object needs a summary and positive/negative phrase lists; the
    older ``positive_feedback`` / ``positiveFeedback`` field names work too.
    """
    from pydantic import ValidationError

    from phraseboard.llm.structured import TranscriptAnalysis

    try:
        rows = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]Not valid JSON:[/red] {exc}")
        raise typer.Exit(1) from exc
    if not isinstance(rows, list):
        console.print("[red]Expected a JSON array of analyses.[/red]")
        raise typer.Exit(1)

    store = _open_store(_settings(data_dir))
    imported = skipped = 0
    try:
        for row in rows:
            try:
                analysis = TranscriptAnalysis.model_validate(row)
            except ValidationError:
                skipped += 1
                continue
            store.insert_analysis(None, analysis)
            imported += 1
    finally:
        store.db.close()

    console.print(f"Imported [bold]{imported}[/bold] analyses ({skipped} skipped).")


@app.command()
def clouds(
    top_n: Annotated[int | None, typer.Option("--top-n", "-n", min=1)] = None,
    max_ngram_size: Annotated[int | None, typer.Option("--max-ngram-size", "-k", min=1)] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Print the ranked positive and negative terms."""
    from phraseboard.phrases.frequency import aggregate

    settings = _settings(data_dir)
    store = _open_store(settings)
    try:
        records = store.list_analyses()
    finally:
        store.db.close()

    summary = aggregate(
        records,
        max_ngram_size=max_ngram_size or settings.max_ngram_size,
        top_n=top_n or settings.top_n,
    )
    console.print(
        f"{len(records)} analyses · {summary.total_positive_phrases} positive phrases"
        f" · {summary.total_negative_phrases} negative phrases"
    )
    if not records:
        console.print("[dim]No analyses stored yet.[/dim]")
        return
    console.print(_ranked_table("Positive", summary.positive_ranked, "green"))
    console.print(_ranked_table("Negative", summary.negative_ranked, "red"))


@app.command()
def matches(
    term: Annotated[str, typer.Argument(help="Word or phrase to look for.")],
    polarity: Annotated[
        str,
        typer.Option("--polarity", "-p", help="positive or negative."),
    ] = "positive",
    data_dir: DataDirOption = None,
) -> None:
    """List analyses whose phrases contain TERM, with the match highlighted."""
    from phraseboard.phrases.models import Polarity
    from phraseboard.phrases.selection import filter_by_term, phrase_contains

    try:
        pol = Polarity(polarity.lower())
    except ValueError as exc:
        console.print(f"[red]Unknown polarity {polarity!r}[/red]: use positive or negative.")
        raise typer.Exit(1) from exc

    store = _open_store(_settings(data_dir))
    try:
        found = filter_by_term(store.list_analyses(), term, pol)
    finally:
        store.db.close()

    console.print(f'{len(found)} analyses contain "{term}" ({pol.value})')
    if not found:
        console.print("[dim]No analyses contain that phrase.[/dim]")
        return
    for record in found:
        console.print(f"\n[bold]Analysis #{record.id}[/bold]")
        for phrase in record.phrases(pol):
            if phrase_contains(phrase, term):
                console.print(Text("  • ").append(_highlighted_text(phrase, term)))
