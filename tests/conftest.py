"""
Pytest configuration and shared fixtures for bookrec tests.
"""

from typing import Dict, List

import numpy as np
import pytest

from bookrec.models.book import CandidateBook, InteractedBook
from bookrec.services.catalog_loader import StaticCatalog
from bookrec.services.library_store import UserLibrary


# =============================================================================
# Builders
# =============================================================================

def interacted(isbn: str, **fields) -> InteractedBook:
    """Library entry with sensible display defaults."""
    fields.setdefault("title", f"Book {isbn}")
    return InteractedBook(isbn=isbn, **fields)


def candidate(isbn: str, **fields) -> CandidateBook:
    """Catalog entry with sensible display defaults."""
    fields.setdefault("title", f"Book {isbn}")
    return CandidateBook(isbn=isbn, **fields)


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def fantasy_fan() -> List[InteractedBook]:
    """One favorited fantasy book by Tolkien."""
    return [interacted("A", title="The Hobbit", genre="fantasy", author="Tolkien", favorite=True)]


@pytest.fixture
def library_entries() -> Dict[str, Dict]:
    """Raw isbn -> entry mapping as a library provider would hold it."""
    return {
        "9780261103344": {
            "isbn": "9780261103344",
            "title": "The Hobbit",
            "author": "J.R.R. Tolkien",
            "genre": "Fantasy",
            "favorite": True,
        },
        "9780141439518": {
            "isbn": "9780141439518",
            "title": "Pride and Prejudice",
            "author": "Jane Austen",
            "genre": "Romance",
            "rated": True,
            "rating": 5,
        },
    }


@pytest.fixture
def catalog_books() -> List[Dict]:
    """Catalog superset: the two library books plus candidates across genres."""
    return [
        {"isbn": "9780261103344", "title": "The Hobbit", "author": "J.R.R. Tolkien", "genre": "Fantasy"},
        {"isbn": "9780141439518", "title": "Pride and Prejudice", "author": "Jane Austen", "genre": "Romance"},
        {"isbn": "9780261102385", "title": "The Fellowship of the Ring", "author": "J.R.R. Tolkien", "genre": "Fantasy"},
        {"isbn": "9780553573404", "title": "A Game of Thrones", "author": "George R.R. Martin", "genre": "Fantasy"},
        {"isbn": "9780141439587", "title": "Emma", "author": "Jane Austen", "genre": "Romance"},
        {"isbn": "9780547928227", "title": "The Silmarillion", "author": "J.R.R. Tolkien", "genre": "Mythology"},
        {"isbn": "9780765326355", "title": "The Way of Kings", "author": "Brandon Sanderson", "genre": "Fantasy"},
        {"isbn": "9780451524935", "title": "1984", "author": "George Orwell", "genre": "Dystopian"},
        {"isbn": "9780062315007", "title": "The Alchemist", "author": "Paulo Coelho", "genre": "Fiction"},
        {"isbn": "9780439023528", "title": "The Hunger Games", "author": "Suzanne Collins", "genre": "Dystopian"},
    ]


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator so tier shuffles are reproducible."""
    return np.random.default_rng(42)


@pytest.fixture
def user_library(library_entries) -> UserLibrary:
    return UserLibrary(library_entries)


@pytest.fixture
def static_catalog(catalog_books) -> StaticCatalog:
    return StaticCatalog(catalog_books)


# =============================================================================
# Environment
# =============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep BOOKREC_* variables from the host out of every test."""
    for key in (
        "BOOKREC_CONFIG_PATH",
        "BOOKREC_BATCH_SIZE",
        "BOOKREC_MIN_SCORE",
        "BOOKREC_SEED",
        "BOOKREC_CATALOG_PATH",
        "BOOKREC_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    # Drop the cached instance; the next get_settings() reads the cleaned env
    monkeypatch.setattr("bookrec.settings._settings", None)
    yield
