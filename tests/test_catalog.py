"""Tests for the example catalog: loading, filtering and lookups."""

import pytest
from pydantic import ValidationError

from catalog import (
    Category,
    ExampleNotFoundError,
    UnknownCategoryError,
    category_counts,
    clear_catalog_cache,
    filter_by_category,
    get_example,
    load,
    parse_category,
)
from shell_parser import CatalogParseError, parse_shell


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_catalog_cache()
    yield
    clear_catalog_cache()


class TestLoad:
    def test_loads_every_example_in_source_order(self):
        examples = load()
        assert len(examples) == 15
        assert [ex.number for ex in examples] == list(range(1, 16))
        assert examples[0].description == "Find all books in a specific genre"
        assert examples[0].query_text == 'db.books.find({ genre: "Programming" })'
        assert examples[-1].description == "Explain performance"

    def test_load_is_idempotent(self):
        first = load()
        second = load()
        assert first == second
        assert first is second

    def test_reload_after_cache_clear_gives_equal_catalog(self):
        first = load()
        clear_catalog_cache()
        assert load() == first

    def test_every_category_is_enumerated(self):
        assert all(isinstance(ex.category, Category) for ex in load())

    def test_every_bundled_statement_parses(self):
        for ex in load():
            assert len(parse_shell(ex.query_text)) == ex.statement_count

    def test_multi_statement_examples(self):
        by_description = {ex.description: ex for ex in load()}
        assert by_description["Sorting"].statement_count == 2
        assert "// ascending" in by_description["Sorting"].query_text
        assert by_description["Pagination (5 per page)"].statement_count == 2

    def test_examples_are_immutable(self):
        example = load()[0]
        with pytest.raises(ValidationError):
            example.description = "changed"

    def test_custom_file(self, tmp_path):
        source = tmp_path / "custom.js"
        source.write_text(
            "// --- INDEXING ---\n// Text index\ndb.books.createIndex({ title: \"text\" })\n",
            encoding="utf-8",
        )
        examples = load(source)
        assert len(examples) == 1
        assert examples[0].category is Category.INDEXING
        assert load(source) is examples

    def test_custom_file_with_byte_order_mark(self, tmp_path):
        source = tmp_path / "bom.js"
        source.write_text(
            "\ufeff// --- BASIC CRUD ---\n// Find all\ndb.books.find()\n",
            encoding="utf-8",
        )
        examples = load(source)
        assert len(examples) == 1
        assert examples[0].category is Category.CRUD

    def test_custom_file_with_unknown_section(self, tmp_path):
        source = tmp_path / "bad.js"
        source.write_text("// --- MISC ---\n// Something\ndb.books.find()\n", encoding="utf-8")
        with pytest.raises(CatalogParseError, match="unknown section"):
            load(source)

    def test_custom_file_with_invalid_statement(self, tmp_path):
        source = tmp_path / "bad.js"
        source.write_text("// --- BASIC CRUD ---\n// Broken\ndb.books.find({ x: )\n", encoding="utf-8")
        with pytest.raises(CatalogParseError, match="invalid statement"):
            load(source)


class TestFilterByCategory:
    @pytest.mark.parametrize("category", list(Category))
    def test_returns_only_matching_category(self, category):
        examples = filter_by_category(category)
        assert examples
        assert all(ex.category == category for ex in examples)

    def test_indexing_examples_in_order(self):
        examples = filter_by_category("Indexing")
        assert [ex.description for ex in examples] == [
            "Index on title",
            "Compound index on author + published_year",
            "Explain performance",
        ]
        assert [ex.number for ex in examples] == [13, 14, 15]

    def test_preserves_relative_order(self):
        for category in Category:
            numbers = [ex.number for ex in filter_by_category(category)]
            assert numbers == sorted(numbers)

    def test_categories_partition_the_catalog(self):
        total = sum(len(filter_by_category(c)) for c in Category)
        assert total == len(load())

    def test_unknown_category(self):
        with pytest.raises(UnknownCategoryError) as exc:
            filter_by_category("Sharding")
        assert "Indexing" in str(exc.value)

    def test_explicit_example_sequence(self):
        subset = load()[:6]
        assert [ex.number for ex in filter_by_category("AdvancedQuery", subset)] == [6]


class TestCategoryHelpers:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("CRUD", Category.CRUD),
            ("crud", Category.CRUD),
            ("AdvancedQuery", Category.ADVANCED_QUERY),
            ("advanced-query", Category.ADVANCED_QUERY),
            ("ADVANCED_QUERY", Category.ADVANCED_QUERY),
            ("aggregation", Category.AGGREGATION),
            (Category.INDEXING, Category.INDEXING),
        ],
    )
    def test_parse_category(self, name, expected):
        assert parse_category(name) is expected

    def test_category_counts(self):
        assert category_counts() == {
            "CRUD": 5,
            "AdvancedQuery": 4,
            "Aggregation": 3,
            "Indexing": 3,
        }


class TestGetExample:
    def test_lookup_by_number(self):
        assert get_example(4).description == "Update price of a specific book"

    @pytest.mark.parametrize("number", [0, -1, 16])
    def test_out_of_range(self, number):
        with pytest.raises(ExampleNotFoundError) as exc:
            get_example(number)
        assert "1-15" in str(exc.value)
