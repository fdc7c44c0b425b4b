"""
Constants for tables, task priorities and user roles.
"""
from __future__ import annotations

# Gateway tables
TASKS_TABLE = "tasks"
USERS_TABLE = "users"

# Task priority (stored in tasks.priority)
PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
PRIORITIES = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH)
DEFAULT_PRIORITY = PRIORITY_MEDIUM

# Default user roles: tag -> (label, weight)
ROLE_MANAGER = "manager"
ROLE_SOCIAL_MEDIA = "social_media"
DEFAULT_ROLE = ROLE_SOCIAL_MEDIA
DEFAULT_ROLES = (
    (ROLE_MANAGER, "Gerente", "primary"),
    (ROLE_SOCIAL_MEDIA, "Social Media", "secondary"),
)

# Visual weights (badge classes)
WEIGHT_DESTRUCTIVE = "destructive"
WEIGHT_PRIMARY = "primary"
WEIGHT_SECONDARY = "secondary"
WEIGHT_MUTED = "muted"

# Keyboard value meaning "no assignee"; never stored
NONE_SENTINEL = "none"

# Notification texts used when the gateway gives no message
GENERIC_ERROR_MESSAGE = "Erro desconhecido"
