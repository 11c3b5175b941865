"""Module injected ahead of the overlays of every inline evaluation."""

from typing import Any, Dict

from nspawnc.compiler.host import MDNS_PORT
from nspawnc.compiler.merge import Priority, Setting, merge_layers
from nspawnc.compiler.network import CONTAINER_IFNAME, CONTAINER_NETWORK_UNIT, container_layers
from nspawnc.models.container import ContainerDefinition, NetworkMode
from nspawnc.utils.nix import NixExpr


# networkd section -> systemd.network.networks.<name> option
NIXOS_SECTIONS = {
    "Match": "matchConfig",
    "Link": "linkConfig",
    "Network": "networkConfig",
    "DHCP": "dhcpConfig",
    "DHCPv4": "dhcpV4Config",
    "DHCPv6": "dhcpV6Config",
    "DHCPServer": "dhcpServerConfig",
    "IPv6AcceptRA": "ipv6AcceptRAConfig",
    "IPv6SendRA": "ipv6SendRAConfig",
    "Bridge": "bridgeConfig",
}

# Evaluated against the host's nixpkgs bound in the expression template
HOST_PLATFORM = NixExpr("hostPkgs.stdenv.hostPlatform")


def nixos_section(section: str) -> str:
    """Option name of a networkd section."""
    if section in NIXOS_SECTIONS:
        return NIXOS_SECTIONS[section]
    return section[:1].lower() + section[1:] + "Config"


def container_network_module(definition: ContainerDefinition) -> Dict[str, Any]:
    """Merged container-side link config as NixOS options.

    Fields coming from the baseline keep their tier so the inline config can
    still override them.
    """
    merged = merge_layers(container_layers(definition.network))
    return {nixos_section(section): fields for section, fields in merged.items()}


def injected_module(definition: ContainerDefinition) -> Dict[str, Any]:
    """Options forced or defaulted into the container's own evaluation."""
    module: Dict[str, Any] = {
        "boot": {
            "isContainer": Setting(True, Priority.FORCED),
        },
        "networking": {
            "hostName": Setting(definition.name, Priority.DEFAULT),
        },
        "nixpkgs": {
            "hostPlatform": Setting(HOST_PLATFORM, Priority.DEFAULT),
        },
    }

    if definition.network.mode != NetworkMode.DISABLED:
        module["networking"]["firewall"] = {
            "interfaces": {
                CONTAINER_IFNAME: {
                    "allowedTCPPorts": [MDNS_PORT],
                    "allowedUDPPorts": [MDNS_PORT],
                },
            },
        }
        module["systemd"] = {
            "network": {
                "networks": {
                    CONTAINER_NETWORK_UNIT: container_network_module(definition),
                },
            },
        }

    return module
