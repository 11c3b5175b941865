"""Generated artifact models."""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Section -> field -> value, in systemd-networkd naming.
LinkConfig = Dict[str, Dict[str, Any]]


class LinkKind(str, Enum):
    """networkd link kind of the host-side interface."""
    VETH = "veth"
    BRIDGE = "bridge"


class InterfaceAssignment(BaseModel):
    """Host-side interface derived for a container."""
    if_name: str
    kind: LinkKind
    zone: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class BindLists(BaseModel):
    """Serialized bind mounts, each sorted by container path."""
    read_write: List[str] = Field(default_factory=list)
    read_only: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ExecParams(BaseModel):
    """[Exec] section of the .nspawn unit."""
    ephemeral: bool = True
    boot: bool = False
    parameters: str
    private_users: str = "pick"
    link_journal: str = "try-host"
    timezone: str = "off"
    kill_signal: str = "SIGRTMIN+3"

    model_config = ConfigDict(frozen=True)


class FilesParams(BaseModel):
    """[Files] section of the .nspawn unit."""
    private_users_ownership: str = "chown"
    bind: List[str] = Field(default_factory=list)
    bind_read_only: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class NetworkParams(BaseModel):
    """[Network] section of the .nspawn unit."""
    private: bool = True
    virtual_ethernet: bool
    zone: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class UnitArtifact(BaseModel):
    """Parameters consumed by systemd-nspawn@<name>.service."""
    exec: ExecParams
    files: FilesParams
    network: NetworkParams

    model_config = ConfigDict(frozen=True)

    def sections(self) -> Dict[str, Dict[str, Any]]:
        """Return the unit as .nspawn sections with systemd key names."""
        network: Dict[str, Any] = {
            "Private": self.network.private,
            "VirtualEthernet": self.network.virtual_ethernet,
        }
        if self.network.zone is not None:
            network["Zone"] = self.network.zone

        return {
            "Exec": {
                "Ephemeral": self.exec.ephemeral,
                "Boot": self.exec.boot,
                "Parameters": self.exec.parameters,
                "PrivateUsers": self.exec.private_users,
                "LinkJournal": self.exec.link_journal,
                "Timezone": self.exec.timezone,
                "KillSignal": self.exec.kill_signal,
            },
            "Files": {
                "PrivateUsersOwnership": self.files.private_users_ownership,
                "Bind": list(self.files.bind),
                "BindReadOnly": list(self.files.bind_read_only),
            },
            "Network": network,
        }


class FirewallRule(BaseModel):
    """Ports opened on interfaces matching a wildcard pattern."""
    interface_pattern: str
    allowed_tcp_ports: List[int] = Field(default_factory=list)
    allowed_udp_ports: List[int] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class TmpfilesRule(BaseModel):
    """systemd-tmpfiles directory creation rule."""
    path: str
    type: str = "d"
    mode: str = "-"
    user: str
    group: str

    model_config = ConfigDict(frozen=True)

    def line(self) -> str:
        """Render as a tmpfiles.d line."""
        return f"{self.type} {self.path} {self.mode} {self.user} {self.group} - -"


class HostArtifactSet(BaseModel):
    """Host-global artifacts, keyed by container name where applicable."""
    firewall: Dict[str, FirewallRule] = Field(default_factory=dict)
    tmpfiles: Dict[str, TmpfilesRule] = Field(default_factory=dict)
    activation: List[str] = Field(default_factory=list)
    restart_triggers: Dict[str, str] = Field(default_factory=dict)


class ContainerArtifacts(BaseModel):
    """Everything generated for a single container."""
    name: str
    path: str
    interface: Optional[InterfaceAssignment] = None
    host_network: Optional[LinkConfig] = None
    container_network: Optional[LinkConfig] = None
    binds: BindLists
    unit: UnitArtifact


class ArtifactSet(BaseModel):
    """Result of one resolution pass."""
    containers: Dict[str, ContainerArtifacts] = Field(default_factory=dict)
    host_networks: Dict[str, LinkConfig] = Field(default_factory=dict)
    host: HostArtifactSet = Field(default_factory=HostArtifactSet)

    def to_json(self) -> str:
        """Serialize deterministically."""
        return json.dumps(self.model_dump(mode="json"), indent=2, sort_keys=True) + "\n"

    @property
    def is_empty(self) -> bool:
        """Whether nothing was generated."""
        return not self.containers and not self.host_networks and not self.host.firewall
