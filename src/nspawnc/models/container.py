"""Container definition models."""

import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Must be usable as a path segment below the machines dir and as an
# interface name fragment.
_CONTAINER_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")

# Section -> field -> value; a None section is unset.
LinkOverride = Dict[str, Optional[Dict[str, Any]]]


class NetworkMode(str, Enum):
    """How a container is attached to the host network."""
    DISABLED = "disabled"
    POINT_TO_POINT = "point-to-point"
    BRIDGED = "bridged"


class BindSpec(BaseModel):
    """Bind mount from the host into the container."""
    host_path: Optional[str] = Field(None, description="Path on the host, defaults to the container path")
    options: List[str] = Field(default_factory=list, description="systemd-nspawn bind options")
    read_only: bool = Field(default=False)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("options")
    @classmethod
    def dedupe_options(cls, v):
        """Keep the first occurrence of each option."""
        seen = []
        for option in v:
            if option not in seen:
                seen.append(option)
        return seen


class NetworkSpec(BaseModel):
    """Network attachment and link config overrides."""
    veth: bool = Field(default=True, description="Create a veth link between host and container")
    zone: Optional[str] = Field(None, description="Attach the host side to the vz-<zone> bridge")
    host: Optional[LinkOverride] = Field(None, description="networkd override for the host side")
    container: Optional[LinkOverride] = Field(None, description="networkd override for the container side")

    model_config = ConfigDict(extra="forbid")

    @field_validator("zone")
    @classmethod
    def validate_zone(cls, v):
        """Validate zone name."""
        if v is not None and not _CONTAINER_NAME_RE.match(v):
            raise ValueError(f"Zone name '{v}' is invalid")
        return v

    @property
    def mode(self) -> NetworkMode:
        """Effective network mode."""
        if not self.veth:
            return NetworkMode.DISABLED
        if self.zone is not None:
            return NetworkMode.BRIDGED
        return NetworkMode.POINT_TO_POINT


class ContainerDefinition(BaseModel):
    """Operator-authored desired state of one container."""
    name: str = Field(..., description="Container name")
    auto_start: bool = Field(default=True, description="Start with machines.target")
    restart_if_changed: bool = Field(default=True, description="Restart when the system path changes")
    network: NetworkSpec = Field(default_factory=NetworkSpec)
    binds: Dict[str, BindSpec] = Field(default_factory=dict, description="Keys are paths in the container")
    config: Optional[Dict[str, Any]] = Field(None, description="Inline NixOS module")
    path: Optional[str] = Field(None, description="Prebuilt system path")

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        """Validate container name."""
        if not _CONTAINER_NAME_RE.match(v):
            raise ValueError(
                f"Container name '{v}' is invalid, use letters, digits, '.', '_' and '-'"
            )
        return v

    @property
    def is_inline(self) -> bool:
        """Whether the system path comes from inline evaluation."""
        return self.config is not None
