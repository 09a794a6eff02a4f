"""Command-line interface for the Bayesian classifier.

Every command works against a JSON model file, loading it on start and
saving it after training. Output is rendered with ``rich`` or emitted as
JSON.

Usage::

    bayesian-classifier train "buy cheap pills" --category spam
    bayesian-classifier train "a/b/c" --category x --delimited
    bayesian-classifier score pills
    bayesian-classifier categorize "buy pills now" --normalize
    bayesian-classifier categories

Settings can also come from ``BAYES_*`` environment variables or a
``.env`` file.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .classifier import BayesianClassifier
from .config import DEFAULT_PROB, DEFAULT_WEIGHT, ClassifierConfig
from .errors import ClassifierError, PersistenceError
from .log import setup_logging
from .models import ScoreItem
from .storage import FileStorage

console = Console()


def _open(ctx: click.Context) -> BayesianClassifier:
    """Build the engine from the group options, exiting on bad settings."""
    opts = ctx.obj
    try:
        config = ClassifierConfig.from_mapping({
            "default_prob": opts["prob"],
            "default_weight": opts["weight"],
            "segmenter": opts["segmenter"],
            "storage": FileStorage(opts["model"]),
        })
        return BayesianClassifier(config)
    except (ClassifierError, ImportError) as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        sys.exit(1)


def _save(classifier: BayesianClassifier) -> None:
    try:
        classifier.export()
    except PersistenceError as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        sys.exit(1)


@click.group()
@click.version_option(package_name="bayesian-classifier")
@click.option("--model", "-m", type=click.Path(path_type=Path), envvar="BAYES_STORAGE_PATH",
              default="model.json", show_default=True, help="JSON model file.")
@click.option("--prob", type=float, envvar="BAYES_DEFAULT_PROB", default=DEFAULT_PROB,
              show_default=True, help="Assumed probability for rare terms.")
@click.option("--weight", type=float, envvar="BAYES_DEFAULT_WEIGHT", default=DEFAULT_WEIGHT,
              show_default=True, help="Weight of the assumed probability.")
@click.option("--segmenter", type=click.Choice(["regex", "jieba"]), envvar="BAYES_SEGMENTER",
              default="regex", show_default=True, help="Tokenizer for training and categorizing.")
@click.option("--verbose", "-v", is_flag=True, help="Show log output.")
@click.pass_context
def main(ctx: click.Context, model: Path, prob: float, weight: float, segmenter: str,
         verbose: bool) -> None:
    """Bayesian text classifier.

    Train categories from labeled documents, then score words and
    categorize new documents.
    """
    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    ctx.obj = {"model": model, "prob": prob, "weight": weight, "segmenter": segmenter}


@main.command()
@click.argument("text")
@click.option("--category", "-c", required=True, help="Category label.")
@click.option("--delimited", "-d", is_flag=True, help="TEXT is pre-split on a delimiter.")
@click.option("--delimiter", default="/", show_default=True, help="Delimiter for --delimited.")
@click.pass_context
def train(ctx: click.Context, text: str, category: str, delimited: bool, delimiter: str) -> None:
    """Train the model on one document.

    Example: bayesian-classifier train "meeting agenda attached" -c ham
    """
    classifier = _open(ctx)
    if delimited:
        classifier.train_delimited(text, category, delimiter)
    else:
        classifier.train(text, category)
    _save(classifier)
    label = category.strip()
    console.print(f"Trained [cyan]{escape(label)}[/] "
                  f"({classifier.list_categories().get(label, 0):g} documents)")


@main.command("train-file")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--category", "-c", required=True, help="Category label.")
@click.option("--delimited", "-d", is_flag=True, help="Lines are pre-split on a delimiter.")
@click.option("--delimiter", default="/", show_default=True, help="Delimiter for --delimited.")
@click.pass_context
def train_file(ctx: click.Context, file: Path, category: str, delimited: bool,
               delimiter: str) -> None:
    """Train on every non-empty line of FILE as a separate document.

    Example: bayesian-classifier train-file spam.txt -c spam
    """
    classifier = _open(ctx)
    count = 0
    with open(file, "r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            if delimited:
                classifier.train_delimited(line, category, delimiter)
            else:
                classifier.train(line, category)
            count += 1
    _save(classifier)
    console.print(f"Trained {count} documents under [cyan]{escape(category.strip())}[/]")


@main.command()
@click.argument("word")
@click.option("--category", "-c", default=None, help="Only score this category.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def score(ctx: click.Context, word: str, category: str | None, output: str) -> None:
    """Show a word's probability under each category.

    Example: bayesian-classifier score pills
    """
    items = _open(ctx).score_word(word, category)
    _emit(items, output, f"Word scores: {word}")


@main.command()
@click.argument("text")
@click.option("--normalize", "-n", is_flag=True, help="Normalize scores to sum to 1.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def categorize(ctx: click.Context, text: str, normalize: bool, output: str) -> None:
    """Rank categories for a document.

    Example: bayesian-classifier categorize "buy pills now"
    """
    items = _open(ctx).categorize(text, normalize=normalize)
    _emit(items, output, "Categories")


@main.command()
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def categories(ctx: click.Context, output: str) -> None:
    """List trained categories and their document counts."""
    counts = dict(_open(ctx).list_categories())

    if output == "json":
        click.echo(json.dumps(counts, indent=2, ensure_ascii=False))
        return

    if not counts:
        console.print("[dim]No categories trained yet.[/]")
        return

    table = Table(title="Trained categories")
    table.add_column("Category", style="cyan")
    table.add_column("Documents", justify="right")
    for name in sorted(counts):
        table.add_row(name, f"{counts[name]:g}")
    console.print(table)


# ------------------------------------------------------------------
# Rendering helpers
# ------------------------------------------------------------------

def _emit(items: list[ScoreItem], output: str, title: str) -> None:
    if output == "json":
        click.echo(json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False))
        return

    if not items:
        console.print("[dim]No results.[/]")
        return

    table = Table(title=title)
    table.add_column("#", justify="right", width=4)
    table.add_column("Category", style="cyan")
    table.add_column("Probability", justify="right")
    for i, item in enumerate(items, 1):
        table.add_row(str(i), item.label, f"{item.probability:.6g}")
    console.print(table)


def run() -> None:
    """Console entry point: load a .env file, then dispatch to the CLI."""
    load_dotenv()
    main()


if __name__ == "__main__":
    run()
