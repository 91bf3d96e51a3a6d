"""Securities catalog: storage backends behind the search contract."""

from src.catalog.base import Catalog, CompiledFilter, FilterTerm
from src.catalog.memory import InMemoryCatalog
from src.catalog.repository import CatalogRepository
from src.catalog.schemas import Security

__all__ = [
    "Catalog",
    "CatalogRepository",
    "CompiledFilter",
    "FilterTerm",
    "InMemoryCatalog",
    "Security",
]
