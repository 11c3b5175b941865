"""Pydantic models for definitions, configuration and artifacts."""

from nspawnc.models.artifacts import (
    ArtifactSet,
    BindLists,
    ContainerArtifacts,
    ExecParams,
    FilesParams,
    FirewallRule,
    HostArtifactSet,
    InterfaceAssignment,
    LinkConfig,
    LinkKind,
    NetworkParams,
    TmpfilesRule,
    UnitArtifact,
)
from nspawnc.models.config import (
    CompilerSettings,
    EvaluatorConfig,
    HostConfig,
    NspawncConfig,
    SystemdConfig,
)
from nspawnc.models.container import BindSpec, ContainerDefinition, NetworkMode, NetworkSpec

__all__ = [
    "ArtifactSet",
    "BindLists",
    "BindSpec",
    "CompilerSettings",
    "ContainerArtifacts",
    "ContainerDefinition",
    "EvaluatorConfig",
    "ExecParams",
    "FilesParams",
    "FirewallRule",
    "HostArtifactSet",
    "HostConfig",
    "InterfaceAssignment",
    "LinkConfig",
    "LinkKind",
    "NetworkMode",
    "NetworkParams",
    "NetworkSpec",
    "NspawncConfig",
    "SystemdConfig",
    "TmpfilesRule",
    "UnitArtifact",
]
