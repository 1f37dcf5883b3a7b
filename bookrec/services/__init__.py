"""Input providers: user library store and catalog loader."""

from .catalog_loader import CatalogLoader, LoadedCatalog, StaticCatalog
from .library_store import UserLibrary, rating_label
from .providers import CatalogProvider, LibraryProvider, ListenerRegistry

__all__ = [
    "CatalogLoader",
    "CatalogProvider",
    "LibraryProvider",
    "ListenerRegistry",
    "LoadedCatalog",
    "StaticCatalog",
    "UserLibrary",
    "rating_label",
]
