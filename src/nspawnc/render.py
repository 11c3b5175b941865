"""Rendering of an artifact set into the files the OS managers read."""

import asyncio
import logging
import posixpath
from pathlib import Path
from typing import Any, Dict, List, Mapping

from nspawnc.compiler.units import unit_name
from nspawnc.models.artifacts import ArtifactSet, FirewallRule
from nspawnc.models.config import NspawncConfig
from nspawnc.utils.templates import render_template


logger = logging.getLogger(__name__)

FILE_STEM = "10-nspawnc"
ACTIVATION_TARGET = "machines.target"

HEADER = "# Generated by nspawnc, do not edit.\n"

UNIT_TEMPLATE = """\
{{ header }}
{% for section, fields in sections.items() %}
[{{ section }}]
{% for key, value in fields.items() %}
{% for item in value | as_list %}
{{ key }}={{ item | unit_value }}
{% endfor %}
{% endfor %}
{% if not loop.last %}

{% endif %}
{% endfor %}
"""

TMPFILES_TEMPLATE = """\
{{ header }}
{% for rule in rules %}
{{ rule.line() }}
{% endfor %}
"""

NFTABLES_TEMPLATE = """\
{{ header }}
{% for rule in rules %}
{% if rule.allowed_tcp_ports %}
iifname "{{ rule.interface_pattern | nft_pattern }}" tcp dport { {{ rule.allowed_tcp_ports | join(", ") }} } accept
{% endif %}
{% if rule.allowed_udp_ports %}
iifname "{{ rule.interface_pattern | nft_pattern }}" udp dport { {{ rule.allowed_udp_ports | join(", ") }} } accept
{% endif %}
{% endfor %}
"""


def unit_value(value: Any) -> str:
    """Format a value the way systemd unit files spell it."""
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def as_list(value: Any) -> List[Any]:
    """List-valued keys are written once per item."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def nft_pattern(pattern: str) -> str:
    """Translate an iptables-style ``+`` wildcard to nftables."""
    return pattern[:-1] + "*" if pattern.endswith("+") else pattern


FILTERS = {
    "unit_value": unit_value,
    "as_list": as_list,
    "nft_pattern": nft_pattern,
}


def render_unit(sections: Mapping[str, Mapping[str, Any]]) -> str:
    """Render sections as an INI-style systemd unit."""
    return render_template(UNIT_TEMPLATE, filters=FILTERS, header=HEADER, sections=sections)


def render_firewall(rules: List[FirewallRule]) -> str:
    """Render firewall allowances as nftables rules."""
    return render_template(NFTABLES_TEMPLATE, filters=FILTERS, header=HEADER, rules=rules)


def _relative(directory: str, *parts: str) -> str:
    return posixpath.join(directory, *parts).lstrip("/")


def render_artifacts(artifacts: ArtifactSet, config: NspawncConfig) -> Dict[str, str]:
    """Render every file, keyed by path relative to the filesystem root."""
    systemd = config.systemd
    files: Dict[str, str] = {}

    for name, container in sorted(artifacts.containers.items()):
        files[_relative(systemd.nspawn_dir, f"{name}.nspawn")] = render_unit(container.unit.sections())

    for if_name, network in sorted(artifacts.host_networks.items()):
        files[_relative(systemd.network_dir, f"10-{if_name}.network")] = render_unit(network)

    host = artifacts.host
    if host.tmpfiles:
        rules = [host.tmpfiles[name] for name in sorted(host.tmpfiles)]
        files[_relative(systemd.tmpfiles_dir, f"{FILE_STEM}.conf")] = render_template(
            TMPFILES_TEMPLATE, header=HEADER, rules=rules
        )

    if host.activation:
        files[_relative(systemd.system_dir, f"{ACTIVATION_TARGET}.d", f"{FILE_STEM}.conf")] = render_unit(
            {"Unit": {"Wants": [unit_name(name) for name in host.activation]}}
        )

    for name, trigger in sorted(host.restart_triggers.items()):
        files[_relative(systemd.system_dir, f"{unit_name(name)}.d", f"{FILE_STEM}.conf")] = render_unit(
            {"Unit": {"X-Restart-Triggers": trigger}}
        )

    if host.firewall:
        rules = [host.firewall[pattern] for pattern in sorted(host.firewall)]
        files[_relative(systemd.nftables_dir, f"{FILE_STEM}.nft")] = render_firewall(rules)

    return files


async def write_artifacts(files: Mapping[str, str], root: Path) -> List[Path]:
    """Write rendered files below ``root``, returning the written paths."""
    written = []
    for relative, content in sorted(files.items()):
        target = Path(root) / relative
        await asyncio.to_thread(lambda: target.parent.mkdir(parents=True, exist_ok=True))
        await asyncio.to_thread(target.write_text, content)
        logger.debug(f"Wrote {target}")
        written.append(target)
    return written
