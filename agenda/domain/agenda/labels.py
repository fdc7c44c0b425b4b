from __future__ import annotations

from typing import Dict, Iterable, Tuple

from agenda.constants import (
    DEFAULT_ROLES,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    WEIGHT_DESTRUCTIVE,
    WEIGHT_MUTED,
    WEIGHT_PRIMARY,
)
from agenda.domain.agenda.models import RoleInfo

_PRIORITY_LABELS = {
    PRIORITY_HIGH: "Alta",
    PRIORITY_MEDIUM: "Média",
    PRIORITY_LOW: "Baixa",
}

_PRIORITY_WEIGHTS = {
    PRIORITY_HIGH: WEIGHT_DESTRUCTIVE,
    PRIORITY_MEDIUM: WEIGHT_PRIMARY,
    PRIORITY_LOW: WEIGHT_MUTED,
}


def priority_label(priority: str) -> str:
    return _PRIORITY_LABELS.get(priority, _PRIORITY_LABELS[PRIORITY_MEDIUM])


def priority_weight(priority: str) -> str:
    return _PRIORITY_WEIGHTS.get(priority, WEIGHT_MUTED)


class RoleCatalog:
    """
    Closed set of role tags with their display label and badge weight.

    Lookups never raise: an unknown tag is shown as itself with muted weight.
    """

    def __init__(self, roles: Iterable[Tuple[str, str, str]] = DEFAULT_ROLES) -> None:
        self._roles: Dict[str, RoleInfo] = {}
        for tag, label, weight in roles:
            self._roles[tag] = RoleInfo(tag=tag, label=label, weight=weight)
        if not self._roles:
            raise ValueError("RoleCatalog needs at least one role")

    def __contains__(self, tag: object) -> bool:
        return tag in self._roles

    def tags(self) -> list[str]:
        return list(self._roles)

    def all(self) -> list[RoleInfo]:
        return list(self._roles.values())

    def label(self, tag: str) -> str:
        info = self._roles.get(tag)
        return info.label if info else tag

    def weight(self, tag: str) -> str:
        info = self._roles.get(tag)
        return info.weight if info else WEIGHT_MUTED
