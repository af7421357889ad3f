"""
Example catalog: the ordered, immutable list of query examples.

Examples come from the bundled ``queries_source.QUERIES_JS`` text (or a
file named by ``QUERIES_FILE``) and are parsed once per source; the
resulting tuple is cached so repeated ``load()`` calls return the same
object.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from config import QUERIES_FILE
from logger import logger
from queries_source import QUERIES_JS
from shell_parser import CatalogParseError, ShellSyntaxError, parse_shell, parse_source


class Category(str, Enum):
    CRUD = "CRUD"
    ADVANCED_QUERY = "AdvancedQuery"
    AGGREGATION = "Aggregation"
    INDEXING = "Indexing"


# Section-title keyword → category (first match wins)
SECTION_KEYWORDS = [
    ("CRUD", Category.CRUD),
    ("ADVANCED", Category.ADVANCED_QUERY),
    ("AGGREGATION", Category.AGGREGATION),
    ("INDEX", Category.INDEXING),
]


class UnknownCategoryError(ValueError):
    def __init__(self, name: str):
        self.name = name
        valid = ", ".join(c.value for c in Category)
        super().__init__(f"Unknown category '{name}'. Valid categories: {valid}")


class ExampleNotFoundError(LookupError):
    def __init__(self, number: int, total: int):
        self.number = number
        self.total = total
        super().__init__(f"Example {number} does not exist (catalog has 1-{total})")


class Example(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1, description="1-based position in source order")
    category: Category
    description: str
    query_text: str
    statement_count: int = Field(default=1, ge=1)


Catalog = Tuple[Example, ...]

_catalog_cache: Dict[str, Catalog] = {}


# ---------------------- CATEGORY HELPERS ----------------------

def _normalise(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch not in "-_ ")


def parse_category(name: Union[str, Category]) -> Category:
    """Resolve a user-supplied category name (case and separators ignored)."""
    if isinstance(name, Category):
        return name
    wanted = _normalise(str(name))
    for category in Category:
        if _normalise(category.value) == wanted or _normalise(category.name) == wanted:
            return category
    raise UnknownCategoryError(str(name))


def category_for_section(title: str) -> Optional[Category]:
    upper = title.upper()
    for keyword, category in SECTION_KEYWORDS:
        if keyword in upper:
            return category
    return None


# ---------------------- LOADING ----------------------

def build_catalog(text: str) -> Catalog:
    """Parse examples source text into ``Example`` records."""
    examples = []
    for entry in parse_source(text):
        category = category_for_section(entry["section"])
        if category is None:
            raise CatalogParseError(
                f"unknown section '{entry['section']}'", entry["line"],
            )
        try:
            commands = parse_shell(entry["query_text"])
        except ShellSyntaxError as e:
            raise CatalogParseError(f"invalid statement: {e}", entry["line"]) from e

        examples.append(Example(
            number=len(examples) + 1,
            category=category,
            description=entry["description"],
            query_text=entry["query_text"],
            statement_count=len(commands),
        ))
    return tuple(examples)


def load(path: Optional[Union[str, Path]] = None) -> Catalog:
    """Return every example in source order.

    ``path`` (or the ``QUERIES_FILE`` setting) selects a custom examples
    file; otherwise the bundled queries are used.
    """
    path = path or QUERIES_FILE or None
    key = str(Path(path).resolve()) if path else "<bundled>"

    cached = _catalog_cache.get(key)
    if cached is not None:
        return cached

    text = Path(path).read_text(encoding="utf-8-sig") if path else QUERIES_JS
    examples = build_catalog(text)
    _catalog_cache[key] = examples
    logger.info("Loaded %d examples from %s", len(examples), key)
    return examples


def clear_catalog_cache() -> None:
    _catalog_cache.clear()


# ---------------------- QUERIES ----------------------

def filter_by_category(
    category: Union[str, Category],
    examples: Optional[Iterable[Example]] = None,
) -> Catalog:
    """Examples of one category, original order preserved."""
    wanted = parse_category(category)
    source = load() if examples is None else examples
    return tuple(ex for ex in source if ex.category == wanted)


def get_example(number: int, examples: Optional[Catalog] = None) -> Example:
    source = load() if examples is None else tuple(examples)
    if not 1 <= number <= len(source):
        raise ExampleNotFoundError(number, len(source))
    return source[number - 1]


def category_counts(examples: Optional[Iterable[Example]] = None) -> Dict[str, int]:
    source = load() if examples is None else tuple(examples)
    counts = {c.value: 0 for c in Category}
    for ex in source:
        counts[ex.category.value] += 1
    return counts
