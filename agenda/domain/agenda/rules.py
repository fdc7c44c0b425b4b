from __future__ import annotations

from typing import Optional

from agenda.constants import NONE_SENTINEL, PRIORITIES
from agenda.domain.common.errors import ValidationError


def validate_title(title: Optional[str]) -> str:
    if not title or not title.strip():
        raise ValidationError("O título da tarefa é obrigatório.")
    return title.strip()


def validate_name(name: Optional[str]) -> str:
    if not name or not name.strip():
        raise ValidationError("Nome é obrigatório.")
    return name.strip()


def validate_priority(priority: Optional[str]) -> str:
    if priority not in PRIORITIES:
        raise ValidationError(f"Prioridade inválida: {priority!r}.")
    return priority


def normalize_optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_assignee(value: Optional[str]) -> Optional[str]:
    """The keyboard sentinel and blank selections both mean unassigned."""
    if value is None:
        return None
    value = value.strip()
    if not value or value == NONE_SENTINEL:
        return None
    return value
