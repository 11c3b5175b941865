"""Tests for link config resolution."""

from nspawnc.compiler.interfaces import allocate_interface
from nspawnc.compiler.network import (
    container_baseline,
    host_baseline,
    resolve_link_configs,
)
from nspawnc.models.container import NetworkSpec


class TestBaselines:
    """Test kind-specific baseline templates."""

    def test_veth_host_side(self):
        """Test the host side of a point-to-point link."""
        config = host_baseline(allocate_interface("web", NetworkSpec()))

        assert config["Match"] == {"Kind": "veth", "Name": "ve-web"}
        assert config["Network"]["Address"] == ["0.0.0.0/30", "::/64"]
        assert config["Network"]["DHCPServer"] is True
        assert config["Network"]["IPMasquerade"] == "both"
        assert config["Network"]["IPv6SendRA"] is True
        assert config["DHCPServer"] == {"PersistLeases": False}

    def test_bridge_host_side(self):
        """Test that bridges get a larger address pool."""
        config = host_baseline(allocate_interface("web", NetworkSpec(zone="z1")))

        assert config["Match"] == {"Kind": "bridge", "Name": "vz-z1"}
        assert config["Network"]["Address"] == ["0.0.0.0/27", "::/64"]

    def test_container_side(self):
        """Test the DHCP client defaults inside the container."""
        config = container_baseline()

        assert config["Match"]["Name"] == "host0"
        assert config["Match"]["Virtualization"] == "container"
        assert config["Network"]["DHCP"] is True
        assert config["Network"]["IPv6AcceptRA"] is True
        assert "DHCPServer" not in config


class TestResolveLinkConfigs:
    """Test resolve_link_configs."""

    def test_disabled(self):
        """Test that no configs exist without networking."""
        network = NetworkSpec(veth=False)

        assert resolve_link_configs(allocate_interface("web", network), network) is None

    def test_without_overrides(self):
        """Test that absent overrides yield the baselines."""
        network = NetworkSpec()
        assignment = allocate_interface("web", network)
        pair = resolve_link_configs(assignment, network)

        assert pair.host == host_baseline(assignment)
        assert pair.container == container_baseline()

    def test_sides_are_independent(self):
        """Test that a host override does not touch the container side."""
        network = NetworkSpec(
            host={"Network": {"Address": ["fd42::1/64", "10.23.42.1/28"]}},
        )
        pair = resolve_link_configs(allocate_interface("web", network), network)

        assert pair.host["Network"]["Address"] == ["fd42::1/64", "10.23.42.1/28"]
        assert pair.host["Network"]["DHCPServer"] is True
        assert pair.container == container_baseline()

    def test_container_override(self):
        """Test a static address inside the container."""
        network = NetworkSpec(
            container={"Network": {"Address": ["10.23.42.2/28"], "DHCP": False}},
        )
        pair = resolve_link_configs(allocate_interface("web", network), network)

        assert pair.container["Network"]["Address"] == ["10.23.42.2/28"]
        assert pair.container["Network"]["DHCP"] is False
        assert pair.container["Network"]["MulticastDNS"] is True
