"""Host-global wiring derived from the whole container set."""

import logging
import posixpath
from typing import Mapping

from nspawnc.compiler.interfaces import VETH_PREFIX, ZONE_PREFIX, interface_pattern
from nspawnc.models.artifacts import FirewallRule, HostArtifactSet, TmpfilesRule
from nspawnc.models.config import NspawncConfig
from nspawnc.models.container import ContainerDefinition


logger = logging.getLogger(__name__)

MDNS_PORT = 5353
DHCP_SERVER_PORT = 67


def firewall_rules() -> dict:
    """Allow mDNS and DHCP on every container interface."""
    return {
        interface_pattern(prefix): FirewallRule(
            interface_pattern=interface_pattern(prefix),
            allowed_tcp_ports=[MDNS_PORT],
            allowed_udp_ports=[DHCP_SERVER_PORT, MDNS_PORT],
        )
        for prefix in (VETH_PREFIX, ZONE_PREFIX)
    }


def build_host_artifacts(
    definitions: Mapping[str, ContainerDefinition],
    paths: Mapping[str, str],
    config: NspawncConfig,
) -> HostArtifactSet:
    """Fold the container mapping into host-level artifacts.

    ``paths`` maps every container name to its resolved system path.
    """
    if not definitions:
        return HostArtifactSet()

    names = sorted(definitions)
    owner = str(config.host.userns_base)

    # The machine directory must exist for systemd-nspawn to start, and its
    # ownership pins the user namespace range of the container.
    tmpfiles = {
        name: TmpfilesRule(
            path=posixpath.join(config.systemd.machines_dir, name),
            user=owner,
            group=owner,
        )
        for name in names
    }

    activation = [name for name in names if definitions[name].auto_start]
    restart_triggers = {
        name: paths[name] for name in names if definitions[name].restart_if_changed
    }

    logger.debug(
        f"Host wiring: {len(activation)} auto-started, "
        f"{len(restart_triggers)} restart-triggered containers"
    )
    return HostArtifactSet(
        firewall=firewall_rules(),
        tmpfiles=tmpfiles,
        activation=activation,
        restart_triggers=restart_triggers,
    )
