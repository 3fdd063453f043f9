"""
Translation of customer and material identifiers from the documents
into S/4HANA business partner and product numbers.

Implementations can use:
- A static table from configuration (InMemoryIdentifierMapper)
- No translation at all (IdentityMapper)
- An external lookup service (subclass IdentifierMapperBase)
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional


class IdentifierMapperBase(ABC):

    @abstractmethod
    def lookup(self, identifier: str) -> Optional[str]:
        """
        Translate an identifier.

        Args:
            identifier: Identifier as it appears on the document

        Returns:
            The S/4HANA identifier, or None if there is no mapping entry.
        """
        pass


class InMemoryIdentifierMapper(IdentifierMapperBase):
    """Read-only lookup table. Keys are matched after trimming whitespace."""

    def __init__(self, table: Optional[Mapping[str, str]] = None):
        self._table = {str(k).strip(): str(v) for k, v in (table or {}).items()}

    def lookup(self, identifier: str) -> Optional[str]:
        return self._table.get(str(identifier).strip())

    def __len__(self) -> int:
        return len(self._table)


class IdentityMapper(IdentifierMapperBase):
    """Every identifier maps to itself."""

    def lookup(self, identifier: str) -> Optional[str]:
        return identifier


def create_customer_mapper() -> IdentifierMapperBase:
    from ..core.config import settings
    return InMemoryIdentifierMapper(settings.customer_id_map)


def create_material_mapper() -> IdentifierMapperBase:
    from ..core.config import settings
    return InMemoryIdentifierMapper(settings.material_id_map)
