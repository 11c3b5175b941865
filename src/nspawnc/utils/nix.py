"""Rendering of Python values as Nix expressions."""

import re
from dataclasses import dataclass
from typing import Any

from nspawnc.compiler.merge import Setting


_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_'-]*$")
_RESERVED = {"if", "then", "else", "assert", "with", "let", "in", "rec", "inherit", "or"}

# The only escapes a double-quoted Nix string knows
_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


@dataclass(frozen=True)
class NixExpr:
    """Raw Nix code inserted verbatim."""
    code: str


def nix_string(value: str) -> str:
    """Quote a string, escaping interpolation.

    Raises ValueError for control characters Nix cannot spell.
    """
    chars = []
    for char in value:
        if char in _ESCAPES:
            chars.append(_ESCAPES[char])
        elif ord(char) < 0x20 or char == "\x7f":
            raise ValueError(f"Cannot render control character {char!r} in a Nix string")
        else:
            chars.append(char)
    return '"' + "".join(chars).replace("${", "\\${") + '"'


def nix_attr_name(name: str) -> str:
    """Attribute name, quoted unless it is a plain identifier."""
    if _IDENTIFIER_RE.match(name) and name not in _RESERVED:
        return name
    return nix_string(name)


def nix_path(path: str) -> str:
    """Path value for an absolute filesystem path."""
    return f'(/. + {nix_string(path)})'


def to_nix(value: Any) -> str:
    """Render a value as a Nix expression.

    ``Setting`` leaves are wrapped in the module system function of their
    priority tier, e.g. ``lib.mkDefault (...)``; the rendered code therefore
    expects ``lib`` in scope.
    """
    if isinstance(value, Setting):
        inner = to_nix(value.value)
        modifier = value.priority.nix_modifier
        return f"(lib.{modifier} {inner})" if modifier else inner
    if isinstance(value, NixExpr):
        return f"({value.code})"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        # keeps "[ 1 (-1) ]" from parsing as a subtraction
        return f"({value!r})" if value < 0 else repr(value)
    if isinstance(value, str):
        return nix_string(value)
    if isinstance(value, (list, tuple)):
        return "[ " + " ".join(to_nix(item) for item in value) + " ]" if value else "[ ]"
    if isinstance(value, dict):
        if not value:
            return "{ }"
        body = " ".join(f"{nix_attr_name(str(k))} = {to_nix(v)};" for k, v in value.items())
        return "{ " + body + " }"
    raise TypeError(f"Cannot render {type(value).__name__} as Nix")
