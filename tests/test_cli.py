import json
from unittest.mock import patch

from typer.testing import CliRunner

from cli import app
from db_executor import WriteNotAllowedError

runner = CliRunner()


def test_list_all():
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert len(lines) == 15
    assert lines[0] == "1. [CRUD] Find all books in a specific genre"


def test_list_by_category():
    result = runner.invoke(app, ["list", "--category", "indexing"])
    assert result.exit_code == 0, result.output
    assert result.output.strip().splitlines() == [
        "13. [Indexing] Index on title",
        "14. [Indexing] Compound index on author + published_year",
        "15. [Indexing] Explain performance",
    ]


def test_list_unknown_category(caplog):
    caplog.set_level("WARNING", logger="query_catalog")
    result = runner.invoke(app, ["list", "-c", "Sharding"])
    assert result.exit_code == 1
    assert "Unknown category 'Sharding'" in result.output
    assert "Unknown category" in caplog.text


def test_show():
    result = runner.invoke(app, ["show", "11"])
    assert result.exit_code == 0, result.output
    assert "Author with the most books" in result.output
    assert "{ $limit: 1 }" in result.output


def test_show_out_of_range():
    result = runner.invoke(app, ["show", "0"])
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_categories():
    result = runner.invoke(app, ["categories"])
    assert result.exit_code == 0, result.output
    assert "AdvancedQuery: 4" in result.output


def test_run_prints_json():
    run_result = {"example": 2, "results": [{"operation": "find", "data": [], "result_count": 0}]}
    with patch("cli.run_example", return_value=run_result):
        result = runner.invoke(app, ["run", "2", "--uri", "mongodb://example:27017"])
    assert result.exit_code == 0, result.output
    body = json.loads(result.output)
    assert body["example"]["number"] == 2
    assert body["statement_results"][0]["operation"] == "find"


def test_run_write_refused():
    with patch("cli.run_example", side_effect=WriteNotAllowedError("deleteOne() modifies the database;")):
        result = runner.invoke(app, ["run", "5", "--read-only"])
    assert result.exit_code == 1
    assert "--allow-writes" in result.output


def test_run_connection_error():
    with patch("cli.run_example", side_effect=ConnectionError("Failed to connect to MongoDB cluster")):
        result = runner.invoke(app, ["run", "1"])
    assert result.exit_code == 1
    assert "Failed to connect" in result.output


def test_run_timeout():
    with patch("cli.run_example", side_effect=TimeoutError("Query timed out after 30000 ms")):
        result = runner.invoke(app, ["run", "1"])
    assert result.exit_code == 1
    assert "timed out" in result.output


def test_seed():
    with patch("cli.seed_books", return_value=12) as seed:
        result = runner.invoke(app, ["seed", "--database", "shop", "--no-drop"])
    assert result.exit_code == 0, result.output
    assert "Inserted 12 books into shop" in result.output
    assert seed.call_args.kwargs["drop"] is False
