"""Business rule effect."""

from enum import StrEnum


class RuleEffect(StrEnum):
    """What a matching business rule contributes."""

    ALLOW = "allow"
    DENY = "deny"
