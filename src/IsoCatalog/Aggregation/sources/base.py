"""Source generator contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, List, Optional

from ..models import CandidateRecord
from ..net.client import HttpAccess

__all__ = ["SourceGenerator"]


class SourceGenerator(ABC):
    """Produces candidate records for one upstream site.

    Subclasses set the descriptive class attributes and implement
    :meth:`generate`. Site parsing stays inside the subclass; everything else
    (validation, filtering, catalog assembly) is handled by
    :class:`~IsoCatalog.Aggregation.catalog.CatalogAssembler`.
    """

    name: ClassVar[str] = ""
    pretty_name: ClassVar[str] = ""
    homepage: ClassVar[Optional[str]] = None
    description: ClassVar[Optional[str]] = None

    @abstractmethod
    async def generate(self, access: HttpAccess) -> Optional[List[CandidateRecord]]:
        """Return candidate records, or ``None`` if the site could not be read."""

    @property
    def label(self) -> str:
        return self.pretty_name or self.name or type(self).__name__

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
