"""UniBrain CLI: Learn Mode, Write Mode, one-off grading and the HTTP server."""

import json
import logging
import random
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer

from unibrain.application.config import AppConfig, resolve_config
from unibrain.application.learn import LearnSession, MasteryScheduler
from unibrain.application.write import WriteSession, grade_answer
from unibrain.domain.exceptions import BlankAnswerError, DeckLoadError
from unibrain.domain.models import Flashcard
from unibrain.infrastructure.deck_loader import load_flashcards

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="unibrain: Adaptive flashcard study from your generated courses.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage unibrain configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for unibrain."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.getLogger("unibrain").setLevel(logging.DEBUG)


def _load_deck(config: AppConfig) -> list[Flashcard]:
    if config.deck_path is None:
        typer.secho("No deck given. Pass a path or set 'deck_path' in config.", fg="red")
        raise typer.Exit(1)
    try:
        return load_flashcards(config.deck_path)
    except DeckLoadError as e:
        typer.secho(f"Error: {e}", fg="red")
        raise typer.Exit(1) from e


# ---------------------------------------------------------------------------
# Study commands
# ---------------------------------------------------------------------------


@app.command()
def learn(
    deck: Annotated[
        Path | None,
        typer.Argument(help="Course or flashcard file (JSON/YAML). Defaults to 'deck_path'."),
    ] = None,
    seed: Annotated[
        int | None, typer.Option(help="Seed card selection for a reproducible order.")
    ] = None,
):
    """[bold green]Learn[/bold green]: self-rated study until the deck is mastered."""
    config = resolve_config({"deck_path": deck, "seed": seed})
    flashcards = _load_deck(config)

    rng = random.Random(config.seed) if config.seed is not None else None
    session = LearnSession(flashcards, scheduler=MasteryScheduler(rng=rng))
    if session.is_empty:
        typer.secho("No flashcards available", fg="yellow")
        return

    while True:
        card = session.current
        while card is not None:
            stats = session.stats
            header = (
                f"Mastery: {round(session.state.avg_mastery)}%  Studied: {stats.cards_studied}"
            )
            if stats.current_streak > 2:
                header += f"  {stats.current_streak} streak!"
            typer.echo(f"\n{header}")
            typer.secho(f"Q: {card.card.question}", bold=True)
            typer.prompt("Press Enter to reveal", default="", show_default=False)
            typer.secho(f"A: {card.card.answer}", fg="cyan")
            knew = typer.confirm("Got it?", default=True)
            card = session.answer(knew)

        summary = session.summary()
        typer.secho("\nSession complete!", fg="green", bold=True)
        typer.echo(
            f"Mastery: {summary.avg_mastery}%  Cards reviewed: {summary.cards_studied}"
            f"  Accuracy: {summary.accuracy}%"
        )
        for item in summary.cards:
            typer.echo(f"  {item.mastery:>3}%  {item.question}")

        if not typer.confirm("Study again?", default=False):
            break
        session.restart()


@app.command()
def write(
    deck: Annotated[
        Path | None,
        typer.Argument(help="Course or flashcard file (JSON/YAML). Defaults to 'deck_path'."),
    ] = None,
):
    """[bold green]Write[/bold green]: type each answer and get it graded."""
    config = resolve_config({"deck_path": deck})
    session = WriteSession(_load_deck(config))
    if session.is_empty:
        typer.secho("No flashcards available", fg="yellow")
        return

    while True:
        while not session.complete:
            total = len(session.flashcards)
            typer.echo(f"\nCard {session.index + 1} of {total}")
            typer.secho(f"Q: {session.current.question}", bold=True)

            answer = typer.prompt("Your answer")
            try:
                result = session.submit(answer)
            except BlankAnswerError:
                continue

            if result.is_correct:
                typer.secho("Correct!", fg="green")
            else:
                typer.secho(f"Correct answer: {result.reference_answer}", fg="red")
                if typer.confirm("Override: I was correct?", default=False):
                    session.override_last()
            session.advance()

        typer.secho(
            f"\n{session.correct_count}/{len(session.results)}  {session.feedback()}",
            bold=True,
        )
        typer.echo(f"{session.accuracy}% accuracy")
        for r in session.results:
            mark = typer.style("+", fg="green") if r.correct else typer.style("-", fg="red")
            typer.echo(f"  {mark} {r.card.question}  ->  {r.grade.user_answer}")

        if not typer.confirm("Practice again?", default=False):
            break
        session.restart()


@app.command()
def grade(
    answer: Annotated[str, typer.Argument(help="The typed answer.")],
    reference: Annotated[str, typer.Argument(help="The reference answer.")],
    json_output: Annotated[bool, typer.Option("--json", help="Output result as JSON.")] = False,
):
    """Grade one answer against a reference answer."""
    result = grade_answer(answer, reference)
    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
    elif result.is_correct:
        typer.secho(f"correct (similarity {result.similarity:.2f})", fg="green")
    else:
        typer.secho(f"incorrect (similarity {result.similarity:.2f})", fg="red")

    if not result.is_correct:
        raise typer.Exit(1)


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Start the HTTP server."""
    import uvicorn

    config = resolve_config({"server_host": host, "server_port": port})
    typer.secho(
        f"Starting UniBrain server on http://{config.server_host}:{config.server_port}",
        fg="green",
    )
    uvicorn.run(
        "unibrain.server:app",
        host=config.server_host,
        port=config.server_port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
