"""
Required-Flags Validation.

Fails fast with every unset required flag at once, so a script sees the
complete list in a single run.
"""

from collections.abc import Mapping
from typing import Any

from lenscli.core.exceptions import MissingFlagsError


def is_zero(value: Any) -> bool:
    """True for None, "", 0, False and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (bool, int, float)):
        return not value
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def check_required(flags: Mapping[str, Any]) -> None:
    """
    Raise MissingFlagsError naming every flag whose value is a zero value.

    Names are reported in the mapping's insertion order.

    Example:
        check_required({"clusterName": cluster, "name": name})
    """
    missing = [name for name, value in flags.items() if is_zero(value)]
    if missing:
        raise MissingFlagsError(missing)
