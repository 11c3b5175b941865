"""Tests for container definition models."""

import pytest
from pydantic import ValidationError

from nspawnc.models.container import BindSpec, ContainerDefinition, NetworkMode, NetworkSpec


class TestContainerDefinition:
    """Test ContainerDefinition model."""

    def test_minimal_definition(self):
        """Test creating a definition with minimal fields."""
        definition = ContainerDefinition(name="web", path="/nix/store/abc-system")

        assert definition.name == "web"
        assert definition.auto_start is True
        assert definition.restart_if_changed is True
        assert definition.binds == {}
        assert definition.config is None
        assert definition.is_inline is False
        assert definition.network.mode == NetworkMode.POINT_TO_POINT

    def test_full_definition(self):
        """Test creating a definition with all fields."""
        definition = ContainerDefinition(
            name="db",
            auto_start=False,
            restart_if_changed=False,
            network=NetworkSpec(zone="backend", host={"Network": {"DHCPServer": False}}),
            binds={"/var/lib/postgresql": BindSpec(host_path="/mnt/pg", options=["idmap"])},
            config={"services": {"postgresql": {"enable": True}}},
        )

        assert definition.auto_start is False
        assert definition.restart_if_changed is False
        assert definition.network.mode == NetworkMode.BRIDGED
        assert definition.binds["/var/lib/postgresql"].host_path == "/mnt/pg"
        assert definition.is_inline is True

    def test_invalid_name(self):
        """Test that names unusable as path segments are rejected."""
        for name in ["", "a/b", "-web", "with space"]:
            with pytest.raises(ValidationError) as exc_info:
                ContainerDefinition(name=name, path="/x")

            assert "name" in str(exc_info.value)

    def test_unknown_field_rejected(self):
        """Test that typos in definitions are not silently ignored."""
        with pytest.raises(ValidationError):
            ContainerDefinition(name="web", path="/x", autostart=False)


class TestNetworkSpec:
    """Test NetworkSpec model."""

    def test_modes(self):
        """Test derivation of the network mode."""
        assert NetworkSpec().mode == NetworkMode.POINT_TO_POINT
        assert NetworkSpec(zone="z1").mode == NetworkMode.BRIDGED
        assert NetworkSpec(veth=False).mode == NetworkMode.DISABLED
        assert NetworkSpec(veth=False, zone="z1").mode == NetworkMode.DISABLED

    def test_invalid_zone(self):
        """Test zone name validation."""
        with pytest.raises(ValidationError) as exc_info:
            NetworkSpec(zone="bad zone")

        assert "zone" in str(exc_info.value)

    def test_override_sections_must_be_mappings(self):
        """Test that a section holding a scalar is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            NetworkSpec(host={"Network": "oops"})

        assert "host" in str(exc_info.value)

        with pytest.raises(ValidationError):
            NetworkSpec(container={"Network": ["DHCP=yes"]})

    def test_override_field_names_must_be_strings(self):
        """Test that non-string field names are rejected."""
        with pytest.raises(ValidationError):
            NetworkSpec(host={"Network": {1: "a"}})

    def test_unset_override_section(self):
        """Test that a None section is accepted as unset."""
        spec = NetworkSpec(host={"Network": None, "DHCPServer": {"PoolSize": 8}})

        assert spec.host["Network"] is None


class TestBindSpec:
    """Test BindSpec model."""

    def test_defaults(self):
        """Test default bind values."""
        spec = BindSpec()

        assert spec.host_path is None
        assert spec.options == []
        assert spec.read_only is False

    def test_options_are_an_ordered_set(self):
        """Test that repeated options keep their first position."""
        spec = BindSpec(options=["idmap", "norbind", "idmap"])

        assert spec.options == ["idmap", "norbind"]
