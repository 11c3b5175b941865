"""Artifact generation stages."""

from nspawnc.compiler.binds import resolve_binds, serialize_bind
from nspawnc.compiler.host import build_host_artifacts
from nspawnc.compiler.interfaces import allocate_interface
from nspawnc.compiler.merge import LinkConfigLayer, Priority, merge_layers, resolve_layers
from nspawnc.compiler.network import resolve_link_configs
from nspawnc.compiler.units import build_unit

__all__ = [
    "LinkConfigLayer",
    "Priority",
    "allocate_interface",
    "build_host_artifacts",
    "build_unit",
    "merge_layers",
    "resolve_binds",
    "resolve_layers",
    "resolve_link_configs",
    "serialize_bind",
]
