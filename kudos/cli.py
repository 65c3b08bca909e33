"""Kudos CLI -- run the moderation engine from the command line."""

from __future__ import annotations

import asyncio
import json
import logging

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from kudos import __version__

console = Console()

_STATUS_STYLE = {
    "APPROVED": "green",
    "PENDING": "yellow",
    "FLAGGED": "magenta",
    "REJECTED": "red",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(path: str | None):
    from kudos.moderation.config import load_config
    from kudos.moderation.models import ModerationConfig

    return load_config(path) if path else ModerationConfig()


def _classifier(use_ai: bool):
    if not use_ai:
        return None
    from kudos.moderation.ai import OpenAIModerationClassifier

    classifier = OpenAIModerationClassifier.from_env()
    if classifier is None:
        console.print("[yellow]OPENAI_API_KEY not set -- continuing without AI moderation.[/]")
    return classifier


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """Kudos -- testimonial moderation engine.

    Evaluate testimonials against a project's moderation settings and see
    the verdict together with every diagnostic flag.
    """
    _configure_logging(verbose)


# ── Check ────────────────────────────────────────────────────────────


@main.command()
@click.argument("text")
@click.option("--config", "-c", "config_path", default=None, help="YAML moderation settings")
@click.option("--email", default=None, help="Author email")
@click.option("--rating", type=click.IntRange(1, 5), default=None, help="Star rating (1-5)")
@click.option("--verified", is_flag=True, help="Author identity is verified")
@click.option("--ai/--no-ai", default=False, help="Consult the OpenAI moderation API")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def check(
    text: str,
    config_path: str | None,
    email: str | None,
    rating: int | None,
    verified: bool,
    ai: bool,
    as_json: bool,
):
    """Moderate a single testimonial TEXT."""
    from kudos.moderation.engine import ModerationEngine
    from kudos.moderation.models import SubmissionInput

    config = _load_config(config_path)
    submission = SubmissionInput(
        content=text, author_email=email, rating=rating, is_verified=verified
    )
    result = asyncio.run(
        ModerationEngine().evaluate_async(submission, config, classifier=_classifier(ai))
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    style = _STATUS_STYLE[result.status.value]
    body = "\n".join(f"• {flag}" for flag in result.flags) or "[dim]No flags[/]"
    console.print(
        Panel(
            body,
            title=f"[bold {style}]{result.status.value}[/]  score {result.score:.2f}",
            subtitle="auto-publish" if result.auto_publish else None,
        )
    )


# ── Batch ────────────────────────────────────────────────────────────


@main.command()
@click.argument("submissions_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "-c", "config_path", default=None, help="YAML moderation settings")
@click.option("--batch-size", default=50, show_default=True, type=click.IntRange(min=1))
@click.option("--ai/--no-ai", default=False, help="Consult the OpenAI moderation API")
def batch(submissions_path: str, config_path: str | None, batch_size: int, ai: bool):
    """Moderate every testimonial listed in a YAML file.

    The file holds either a list of submissions or a mapping with
    ``project_id`` and ``submissions`` keys.  Each submission has
    ``content`` and optionally ``email``, ``rating``, ``verified`` and ``ip``.
    Earlier submissions count toward duplicate and velocity checks of
    later ones.
    """
    with open(submissions_path) as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        project_id = str(data.get("project_id", "default"))
        items = data.get("submissions") or []
    else:
        project_id, items = "default", data

    if not isinstance(items, list):
        raise click.BadParameter("submissions must be a list", param_hint="SUBMISSIONS_PATH")

    config = _load_config(config_path)
    counts = asyncio.run(_moderate_batches(items, config, project_id, batch_size, _classifier(ai)))

    table = Table(title=f"Moderation summary ({len(items)} submissions)")
    table.add_column("Status")
    table.add_column("Count", justify="right")
    for status, total in counts.items():
        table.add_row(f"[{_STATUS_STYLE.get(status, 'white')}]{status}[/]", str(total))
    console.print(table)


async def _moderate_batches(items, config, project_id, batch_size, classifier) -> dict[str, int]:
    from kudos.moderation.models import SubmissionInput
    from kudos.moderation.service import (
        InMemoryCorpus,
        InMemoryReviewerLog,
        ModerationService,
    )

    corpus = InMemoryCorpus()
    reviewers = InMemoryReviewerLog()
    service = ModerationService(corpus=corpus, counts=reviewers, classifier=classifier)
    totals = {"APPROVED": 0, "FLAGGED": 0, "REJECTED": 0, "PENDING": 0, "ERROR": 0}

    for start in range(0, len(items), batch_size):
        chunk = items[start:start + batch_size]
        submissions = []
        for item in chunk:
            item = item if isinstance(item, dict) else {"content": str(item)}
            rating = item.get("rating")
            submissions.append((
                SubmissionInput(
                    content=str(item.get("content", "")),
                    author_email=item.get("email"),
                    rating=rating if isinstance(rating, int) and not isinstance(rating, bool) else None,
                    is_verified=bool(item.get("verified", False)),
                ),
                item.get("ip"),
            ))

        results = await asyncio.gather(
            *(service.moderate(sub, config, project_id, ip) for sub, ip in submissions),
            return_exceptions=True,
        )

        for offset, ((sub, ip), result) in enumerate(zip(submissions, results)):
            number = start + offset + 1
            if isinstance(result, Exception):
                totals["ERROR"] += 1
                console.print(f"[red]#{number} failed:[/] {result}")
                continue
            status = result.status.value
            totals[status] += 1
            console.print(
                f"#{number} [{_STATUS_STYLE[status]}]{status}[/] "
                f"(score: {result.score:.2f}) {'; '.join(result.flags)}"
            )
            corpus.add(project_id, sub.content)
            reviewers.record(project_id, ip=ip, email=sub.author_email)

        console.print(f"[dim]Batch {start // batch_size + 1} complete[/]")

    return totals


# ── Normalize ────────────────────────────────────────────────────────


@main.command()
@click.argument("text")
def normalize(text: str):
    """Show the obfuscation-normalized form of TEXT used for profanity matching."""
    from kudos.moderation.normalizer import normalize as normalize_text

    click.echo(normalize_text(text))


if __name__ == "__main__":
    main()
