"""Centralized validation constants for the roles API.

This module provides a single source of truth for the permission target
vocabulary, name patterns and limits used across the validator, the
providers and the routers.
"""

import re
from typing import Final

# =============================================================================
# Permission Target Constants
# =============================================================================

# Operations understood by the Artifactory v2 permissions API
ALLOWED_OPERATIONS: Final[frozenset[str]] = frozenset(
    {
        "read",
        "write",
        "annotate",
        "delete",
        "manage",
        "managedXrayMeta",
        "distribute",
    }
)

# Single-letter privileges of the legacy v1 permissions API
V1_OPERATION_LETTERS: Final[dict[str, str]] = {
    "read": "r",
    "write": "w",
    "annotate": "n",
    "delete": "d",
    "manage": "m",
}

DEFAULT_INCLUDE_PATTERNS: Final[tuple[str, ...]] = ("**",)
DEFAULT_EXCLUDE_PATTERNS: Final[tuple[str, ...]] = ("",)

# Logical names start with a letter so they never collide with positional identities
PERMISSION_TARGET_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^[A-Za-z][A-Za-z0-9_.-]{0,31}$"
)

MAX_PERMISSION_TARGETS_PER_ROLE: Final[int] = 100
MAX_REPOSITORIES_PER_SCOPE: Final[int] = 500
MAX_PATTERNS_PER_SCOPE: Final[int] = 100

# =============================================================================
# Role Constants
# =============================================================================

# Same shape as a Vault generic path segment
ROLE_NAME_PATTERN: Final[str] = r"^\w(([\w.-]+)?\w)?$"
MAX_ROLE_NAME_LENGTH: Final[int] = 255
