from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional


Row = Dict[str, Any]


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime: ...


class IdGenerator(ABC):
    @abstractmethod
    def new_id(self) -> str: ...


class TableGateway(ABC):
    """
    Generic remote-table client. Used the same way for every table.

    Filters are equality filters combined with AND. Adapters raise
    GatewayError with a human-readable message on failure.
    """

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]: ...

    @abstractmethod
    async def insert(self, table: str, values: Mapping[str, Any]) -> Row: ...

    @abstractmethod
    async def update(self, table: str, values: Mapping[str, Any], *, filters: Mapping[str, Any]) -> None: ...

    @abstractmethod
    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> None: ...
