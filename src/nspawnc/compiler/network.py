"""Host- and container-side systemd-networkd link configuration."""

import logging
from typing import Any, Dict, List, NamedTuple, Optional

from nspawnc.compiler.merge import LinkConfigLayer, Priority, resolve_layers
from nspawnc.models.artifacts import InterfaceAssignment, LinkConfig, LinkKind
from nspawnc.models.container import NetworkSpec


logger = logging.getLogger(__name__)

# Interface name of the veth peer inside the container
CONTAINER_IFNAME = "host0"
CONTAINER_NETWORK_UNIT = f"10-container-{CONTAINER_IFNAME}"

# Prefix length of the host-side IPv4 pool, by link kind
HOST_ADDRESS_PREFIX = {
    LinkKind.BRIDGE: 27,
    LinkKind.VETH: 30,
}


class LinkConfigPair(NamedTuple):
    """Resolved link configs for both ends of a container link."""
    host: LinkConfig
    container: LinkConfig


def container_baseline() -> Dict[str, Any]:
    """Default config of the container end (DHCP client)."""
    return {
        "Match": {
            "Kind": "veth",
            "Name": CONTAINER_IFNAME,
            "Virtualization": "container",
        },
        "Network": {
            "DHCP": True,
            "LinkLocalAddressing": True,
            "LLDP": True,
            "EmitLLDP": "customer-bridge",
            "IPv6DuplicateAddressDetection": 0,
            "IPv6AcceptRA": True,
            "MulticastDNS": True,
        },
    }


def host_baseline(assignment: InterfaceAssignment) -> Dict[str, Any]:
    """Default config of the host end (DHCP server, masquerading)."""
    prefix = HOST_ADDRESS_PREFIX[assignment.kind]
    return {
        "Match": {
            "Kind": assignment.kind.value,
            "Name": assignment.if_name,
        },
        "Network": {
            "Address": [f"0.0.0.0/{prefix}", "::/64"],
            "DHCPServer": True,
            "IPMasquerade": "both",
            "LinkLocalAddressing": True,
            "LLDP": True,
            "EmitLLDP": "customer-bridge",
            "IPv6DuplicateAddressDetection": 0,
            "IPv6AcceptRA": False,
            "IPv6SendRA": True,
            "MulticastDNS": True,
        },
        "DHCPServer": {
            "PersistLeases": False,
        },
    }


def host_layers(assignment: InterfaceAssignment, network: NetworkSpec) -> List[LinkConfigLayer]:
    """Layers making up the host-side link config."""
    layers = [LinkConfigLayer(Priority.BASELINE, host_baseline(assignment))]
    if network.host is not None:
        layers.append(LinkConfigLayer(Priority.OVERRIDE, network.host))
    return layers


def container_layers(network: NetworkSpec) -> List[LinkConfigLayer]:
    """Layers making up the container-side link config."""
    layers = [LinkConfigLayer(Priority.BASELINE, container_baseline())]
    if network.container is not None:
        layers.append(LinkConfigLayer(Priority.OVERRIDE, network.container))
    return layers


def resolve_link_configs(
    assignment: Optional[InterfaceAssignment],
    network: NetworkSpec,
) -> Optional[LinkConfigPair]:
    """Resolve both link configs, or None when networking is disabled."""
    if assignment is None:
        return None

    pair = LinkConfigPair(
        host=resolve_layers(host_layers(assignment, network)),
        container=resolve_layers(container_layers(network)),
    )
    logger.debug(f"Resolved link configs for {assignment.if_name}")
    return pair
