"""Host-side interface naming."""

import logging
from typing import Optional

from nspawnc.errors import NameTooLong
from nspawnc.models.artifacts import InterfaceAssignment, LinkKind
from nspawnc.models.container import NetworkMode, NetworkSpec


logger = logging.getLogger(__name__)

# IFNAMSIZ minus the terminating NUL
MAX_IFNAME_LENGTH = 15

VETH_PREFIX = "ve"
ZONE_PREFIX = "vz"

PREFIX_KINDS = {
    VETH_PREFIX: LinkKind.VETH,
    ZONE_PREFIX: LinkKind.BRIDGE,
}


def interface_pattern(prefix: str) -> str:
    """Wildcard matching every interface with the given prefix."""
    return f"{prefix}-+"


def allocate_interface(name: str, network: NetworkSpec) -> Optional[InterfaceAssignment]:
    """Derive the host-side interface for a container.

    Containers naming the same zone share one ``vz-<zone>`` bridge, every
    other networked container gets its own ``ve-<name>`` link. Returns None
    when networking is disabled.
    """
    mode = network.mode
    if mode == NetworkMode.DISABLED:
        logger.debug(f"Networking disabled for container {name}")
        return None

    if mode == NetworkMode.BRIDGED:
        prefix, suffix, field = ZONE_PREFIX, network.zone, "network.zone"
    else:
        prefix, suffix, field = VETH_PREFIX, name, "name"

    if_name = f"{prefix}-{suffix}"
    if len(if_name) > MAX_IFNAME_LENGTH:
        raise NameTooLong(
            f"Interface name '{if_name}' is {len(if_name)} characters long, "
            f"the limit is {MAX_IFNAME_LENGTH}",
            container=name,
            field=field,
        )

    return InterfaceAssignment(
        if_name=if_name,
        kind=PREFIX_KINDS[prefix],
        zone=network.zone if mode == NetworkMode.BRIDGED else None,
    )
