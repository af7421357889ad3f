"""Command-line entry point for the query example catalog."""

import json
from typing import Optional

import typer

from catalog import (
    ExampleNotFoundError,
    UnknownCategoryError,
    category_counts,
    filter_by_category,
    get_example,
    load,
)
from config import ALLOW_WRITES, DATABASE_NAME, MONGO_URI
from db_executor import UnsupportedCommandError, WriteNotAllowedError, run_example
from logger import logger
from response_formatter import example_line, format_example_text, format_run_result
from seed_books import seed_books
from shell_parser import ShellSyntaxError

app = typer.Typer(help="Browse and run example MongoDB queries against a books collection.")


def _fail(message: str) -> typer.Exit:
    logger.warning("%s", message)
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


@app.command("list")
def list_examples(
    category: Optional[str] = typer.Option(
        None,
        "--category",
        "-c",
        help="Only show one category (CRUD, AdvancedQuery, Aggregation, Indexing).",
    ),
) -> None:
    """List examples in source order."""
    try:
        examples = filter_by_category(category) if category else load()
    except UnknownCategoryError as e:
        raise _fail(str(e))
    for example in examples:
        typer.echo(example_line(example))


@app.command()
def show(number: int = typer.Argument(..., help="1-based example number.")) -> None:
    """Show one example's description and query text."""
    try:
        example = get_example(number)
    except ExampleNotFoundError as e:
        raise _fail(str(e))
    typer.echo(format_example_text(example))


@app.command()
def categories() -> None:
    """Show each category with its example count."""
    for name, count in category_counts().items():
        typer.echo(f"{name}: {count}")


@app.command()
def run(
    number: int = typer.Argument(..., help="1-based example number."),
    uri: str = typer.Option(MONGO_URI, "--uri", envvar="MONGO_URI", help="MongoDB connection URI."),
    database: str = typer.Option(DATABASE_NAME, "--database", "-d", help="Database holding the books collection."),
    allow_writes: bool = typer.Option(
        ALLOW_WRITES,
        "--allow-writes/--read-only",
        help="Permit examples that modify data or indexes.",
    ),
) -> None:
    """Execute an example and print its results as JSON."""
    try:
        example = get_example(number)
        result = run_example(uri, database, example, allow_writes=allow_writes)
    except (ExampleNotFoundError, ShellSyntaxError, UnsupportedCommandError) as e:
        raise _fail(str(e))
    except WriteNotAllowedError as e:
        raise _fail(f"{e} Pass --allow-writes to run it.")
    except (TimeoutError, ConnectionError) as e:
        raise _fail(str(e))

    typer.echo(json.dumps(format_run_result(example, result), indent=2))


@app.command()
def seed(
    uri: str = typer.Option(MONGO_URI, "--uri", envvar="MONGO_URI", help="MongoDB connection URI."),
    database: str = typer.Option(DATABASE_NAME, "--database", "-d", help="Target database."),
    drop: bool = typer.Option(True, "--drop/--no-drop", help="Empty the collection first."),
) -> None:
    """Load the sample books collection."""
    try:
        inserted = seed_books(uri, database, drop=drop)
    except ConnectionError as e:
        raise _fail(str(e))
    typer.secho(f"Inserted {inserted} books into {database}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
