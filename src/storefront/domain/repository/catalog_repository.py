"""Abstract repository for the product/addon catalog.

Defined in the domain layer so the domain never depends on
infrastructure.  The catalog is read-only at runtime; a reload returns a
brand-new table rather than mutating the previous one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.catalog import CatalogTable


class CatalogRepository(ABC):

    @abstractmethod
    def load(self) -> CatalogTable:
        """Return a complete, validated snapshot of the catalog."""
