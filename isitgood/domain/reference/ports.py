"""
Port for reference product databases.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import Protocol, runtime_checkable

from isitgood.domain.reference.models import LookupResult, ReferenceDatabase


@runtime_checkable
class IReferenceLookup(Protocol):
    """
    Port for a structured product database.

    One instance per database (food, body). Implementations never
    raise: network or parse failure is reported as not found.
    """

    database: ReferenceDatabase

    async def lookup_by_barcode(self, code: str) -> LookupResult:
        """
        Exact barcode lookup.

        Args:
            code: 8-13 digit barcode

        Returns:
            Found result with product, or not found
        """
        ...

    async def search_by_name(self, query: str) -> LookupResult:
        """
        Simple name search.

        Takes the first result with ingredient text, otherwise the
        first result overall.

        Args:
            query: Free text, usually "brand name"

        Returns:
            Found result with product, or not found
        """
        ...
