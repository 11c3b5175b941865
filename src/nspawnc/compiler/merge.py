"""Priority-based layering of link configuration.

A layer is a payload of sections (``{"Network": {"DHCP": True}}``) tagged
with a priority tier. Layers are reduced field by field: the value of a field
is the one set by the highest-priority layer that sets it, and among layers
of equal priority the last one wins. A key holding ``None`` is unset and
falls through to lower layers.

Sections merge exactly one level deep. Anything below a field, lists
included, is replaced as a whole and never concatenated.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, Mapping, Optional


class Priority(IntEnum):
    """Layer priority tiers, weakest first."""
    BASELINE = 0
    DEFAULT = 1
    OVERRIDE = 2
    FORCED = 3

    @property
    def nix_modifier(self) -> Optional[str]:
        """NixOS module system function expressing this tier."""
        return {
            Priority.BASELINE: "mkDefault",
            Priority.DEFAULT: "mkDefault",
            Priority.OVERRIDE: None,
            Priority.FORCED: "mkForce",
        }[self]


@dataclass(frozen=True)
class LinkConfigLayer:
    """One layer of the merge."""
    priority: Priority
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Setting:
    """A merged value together with the tier that set it."""
    value: Any
    priority: Priority


def merge_layers(layers: Iterable[LinkConfigLayer]) -> Dict[str, Any]:
    """Reduce layers into a tree whose leaves are ``Setting`` objects."""
    result: Dict[str, Any] = {}

    # sorted() is stable, so equal tiers keep their given order
    for layer in sorted(layers, key=lambda l: l.priority):
        for key, value in layer.payload.items():
            if value is None:
                continue

            if isinstance(value, Mapping):
                current = result.get(key)
                section = current if isinstance(current, dict) else {}
                for name, field_value in value.items():
                    if field_value is None:
                        continue
                    section[name] = Setting(deepcopy(field_value), layer.priority)
                if section:
                    result[key] = section
            else:
                result[key] = Setting(deepcopy(value), layer.priority)

    return result


def strip_priorities(merged: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop the tier information from a merged tree."""
    plain: Dict[str, Any] = {}
    for key, value in merged.items():
        if isinstance(value, Setting):
            plain[key] = value.value
        else:
            plain[key] = strip_priorities(value)
    return plain


def resolve_layers(layers: Iterable[LinkConfigLayer]) -> Dict[str, Any]:
    """Merge layers and return plain values."""
    return strip_priorities(merge_layers(layers))
