"""Assembly of the per-container .nspawn unit parameters."""

from typing import Optional

from nspawnc.models.artifacts import (
    BindLists,
    ExecParams,
    FilesParams,
    InterfaceAssignment,
    NetworkParams,
    UnitArtifact,
)
from nspawnc.models.container import NetworkSpec


def unit_name(container: str) -> str:
    """Name of the launch unit of a container."""
    return f"systemd-nspawn@{container}.service"


def build_unit(
    path: str,
    binds: BindLists,
    network: NetworkSpec,
    assignment: Optional[InterfaceAssignment],
) -> UnitArtifact:
    """Assemble exec, files and network parameters of a container."""
    return UnitArtifact(
        # The system's own init is run directly, no boot sequence
        exec=ExecParams(parameters=f"{path.rstrip('/')}/init"),
        # chown the (empty) machine directory once so the picked UID/GID
        # range stays the same across boots
        files=FilesParams(
            bind=list(binds.read_write),
            bind_read_only=list(binds.read_only),
        ),
        network=NetworkParams(
            virtual_ethernet=assignment is not None,
            zone=network.zone,
        ),
    )
