"""Where an authorization decision came from."""

from enum import StrEnum


class DecisionSource(StrEnum):
    """Layer of the resolution that produced the decision."""

    ROLE = "role"
    OVERRIDE = "override"
    RULE = "rule"
    DEFAULT = "default"
