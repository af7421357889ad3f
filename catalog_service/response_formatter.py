"""
Response formatter: JSON-safe dicts for the API and text for the CLI.
"""

from typing import Any, Dict, List

from catalog import Example


def example_summary(example: Example) -> Dict[str, Any]:
    return {
        "number": example.number,
        "category": example.category.value,
        "description": example.description,
        "query_text": example.query_text,
        "statement_count": example.statement_count,
    }


def example_line(example: Example) -> str:
    """One-line listing entry: ``3. [CRUD] Find books by a specific author``."""
    return f"{example.number}. [{example.category.value}] {example.description}"


def format_example_text(example: Example) -> str:
    header = f"Example {example.number}: {example.category.value}"
    return "\n".join([
        header,
        "-" * len(header),
        example.description,
        "",
        example.query_text,
    ])


def clean_documents(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Sanitise non-JSON-serialisable values (bytes, datetime, ObjectId,
    etc.) so FastAPI can encode the response."""
    return [_sanitise_value(doc) for doc in results]


def _sanitise_value(obj: Any) -> Any:
    """Recursively convert non-JSON-safe types to safe representations."""
    if isinstance(obj, dict):
        return {k: _sanitise_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitise_value(item) for item in obj]
    if isinstance(obj, bytes):
        try:
            return obj.decode("utf-8")
        except UnicodeDecodeError:
            return f"[binary {len(obj)} bytes]"
    if isinstance(obj, (int, float, str, bool, type(None))):
        return obj
    # datetime, ObjectId, Decimal128, Timestamp, etc.
    return str(obj)


def format_run_result(example: Example, run_result: Dict[str, Any]) -> Dict[str, Any]:
    """Build the response body for an executed example.

    Each statement result keeps its operation-specific keys; documents
    and explain plans are sanitised recursively.
    """
    statements = clean_documents(run_result.get("results", []))

    return {
        "example": example_summary(example),
        "statement_results": statements,
        "statement_count": len(statements),
    }
