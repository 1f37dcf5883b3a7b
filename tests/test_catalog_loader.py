"""
Catalog Loader Tests

Tests loading catalog fixtures from disk and the in-memory catalog provider.

Run:
----
    pytest tests/test_catalog_loader.py -v
"""

import json

import pytest

from bookrec.services.catalog_loader import CatalogLoader, StaticCatalog


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestCatalogLoader:

    def test_loads_plain_list(self, tmp_path, catalog_books):
        path = _write(tmp_path / "catalog.json", catalog_books)

        catalog = CatalogLoader(path).load()

        assert len(catalog.books) == 10
        assert catalog.metadata == {}
        assert catalog.path == path

    def test_loads_books_object_with_metadata(self, tmp_path, catalog_books):
        path = _write(tmp_path / "catalog.json", {"version": "2024-01", "books": catalog_books})

        catalog = CatalogLoader(path).load()

        assert len(catalog.raw_books) == 10
        assert catalog.metadata == {"version": "2024-01"}

    def test_get_book_ignores_dashes_and_case(self, tmp_path):
        path = _write(tmp_path / "catalog.json", [{"isbn": "OL-45W", "title": "Dune", "genre": "Sci-Fi"}])

        catalog = CatalogLoader(path).load()

        assert catalog.get_book("ol45w").title == "Dune"
        assert catalog.get_book("missing") is None

    def test_numeric_isbns_become_strings(self, tmp_path):
        path = _write(tmp_path / "catalog.json", [{"isbn": 9780261103344, "title": "The Hobbit"}])

        catalog = CatalogLoader(path).load()

        assert catalog.books[0].isbn == "9780261103344"

    def test_skips_malformed_entries(self, tmp_path):
        path = _write(tmp_path / "catalog.json", [
            {"isbn": "A", "title": "Fine"},
            {"isbn": "B", "genres": "not-a-list"},
            "junk",
        ])

        catalog = CatalogLoader(path).load()

        assert [b.isbn for b in catalog.books] == ["A"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CatalogLoader(tmp_path / "nope.json").load()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid JSON"):
            CatalogLoader(path).load()

    def test_wrong_shape(self, tmp_path):
        path = _write(tmp_path / "catalog.json", {"items": []})

        with pytest.raises(ValueError, match="'books' list"):
            CatalogLoader(path).load()


class TestStaticCatalog:

    def test_from_file(self, tmp_path, catalog_books):
        path = _write(tmp_path / "catalog.json", catalog_books)

        catalog = StaticCatalog.from_file(path)

        assert len(catalog) == 10
        assert catalog.get_books()[0]["title"] == "The Hobbit"

    def test_get_books_is_a_copy(self, static_catalog):
        books = static_catalog.get_books()
        books[0]["title"] = "Changed"
        books.append({"isbn": "new"})

        assert static_catalog.get_books()[0]["title"] == "The Hobbit"
        assert len(static_catalog) == 10

    def test_set_books_notifies(self, static_catalog):
        calls = []
        static_catalog.subscribe(lambda: calls.append(1))

        static_catalog.set_books([])

        assert calls == [1]
        assert static_catalog.version == 1
        assert static_catalog.get_books() == []
