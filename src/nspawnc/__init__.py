"""
nspawnc - declarative systemd-nspawn host configuration.

Compiles named container definitions into the .nspawn units, networkd
links, tmpfiles rules and target wiring a host needs to run them.
"""

__version__ = "1.0.0"

# Re-export key components for easier access
from nspawnc.compiler.engine import Compiler
from nspawnc.models.artifacts import ArtifactSet
from nspawnc.models.config import NspawncConfig
from nspawnc.models.container import BindSpec, ContainerDefinition, NetworkSpec

__all__ = [
    "ArtifactSet",
    "BindSpec",
    "Compiler",
    "ContainerDefinition",
    "NetworkSpec",
    "NspawncConfig",
]
