"""Tests for priority-based layer merging."""

from nspawnc.compiler.merge import (
    LinkConfigLayer,
    Priority,
    Setting,
    merge_layers,
    resolve_layers,
    strip_priorities,
)


BASELINE = {
    "Network": {
        "DHCP": True,
        "Address": ["0.0.0.0/30", "::/64"],
        "MulticastDNS": True,
    },
    "DHCPServer": {"PersistLeases": False},
}


class TestResolveLayers:
    """Test field-wise precedence."""

    def test_baseline_only(self):
        """Test that no override yields exactly the baseline."""
        assert resolve_layers([LinkConfigLayer(Priority.BASELINE, BASELINE)]) == BASELINE

    def test_override_wins_per_field(self):
        """Test that only explicitly set fields are replaced."""
        result = resolve_layers([
            LinkConfigLayer(Priority.BASELINE, BASELINE),
            LinkConfigLayer(Priority.OVERRIDE, {"Network": {"DHCP": False}}),
        ])

        assert result["Network"]["DHCP"] is False
        assert result["Network"]["MulticastDNS"] is True
        assert result["Network"]["Address"] == ["0.0.0.0/30", "::/64"]
        assert result["DHCPServer"] == {"PersistLeases": False}

    def test_lists_are_replaced(self):
        """Test that list values are not concatenated."""
        result = resolve_layers([
            LinkConfigLayer(Priority.BASELINE, BASELINE),
            LinkConfigLayer(Priority.OVERRIDE, {"Network": {"Address": ["10.23.42.1/28"]}}),
        ])

        assert result["Network"]["Address"] == ["10.23.42.1/28"]

    def test_none_is_unset(self):
        """Test that a None value falls through to the lower layer."""
        result = resolve_layers([
            LinkConfigLayer(Priority.BASELINE, BASELINE),
            LinkConfigLayer(Priority.OVERRIDE, {"Network": {"DHCP": None}, "DHCPServer": None}),
        ])

        assert result == BASELINE

    def test_layer_order_does_not_matter(self):
        """Test that priority, not position, decides."""
        result = resolve_layers([
            LinkConfigLayer(Priority.FORCED, {"Network": {"DHCP": "ipv4"}}),
            LinkConfigLayer(Priority.OVERRIDE, {"Network": {"DHCP": False}}),
            LinkConfigLayer(Priority.BASELINE, BASELINE),
        ])

        assert result["Network"]["DHCP"] == "ipv4"

    def test_last_writer_wins_within_tier(self):
        """Test that equal priorities keep their given order."""
        result = resolve_layers([
            LinkConfigLayer(Priority.OVERRIDE, {"Network": {"DHCP": "ipv4"}}),
            LinkConfigLayer(Priority.OVERRIDE, {"Network": {"DHCP": "ipv6"}}),
        ])

        assert result["Network"]["DHCP"] == "ipv6"

    def test_new_sections_are_added(self):
        """Test that an override may add sections the baseline lacks."""
        result = resolve_layers([
            LinkConfigLayer(Priority.BASELINE, BASELINE),
            LinkConfigLayer(Priority.OVERRIDE, {"Link": {"MTUBytes": 1400}}),
        ])

        assert result["Link"] == {"MTUBytes": 1400}

    def test_inputs_are_not_mutated(self):
        """Test that merging is a pure function of its layers."""
        override = {"Network": {"Address": ["10.0.0.1/24"]}}
        result = resolve_layers([
            LinkConfigLayer(Priority.BASELINE, BASELINE),
            LinkConfigLayer(Priority.OVERRIDE, override),
        ])
        result["Network"]["Address"].append("10.0.0.2/24")

        assert override == {"Network": {"Address": ["10.0.0.1/24"]}}
        assert BASELINE["Network"]["Address"] == ["0.0.0.0/30", "::/64"]


class TestMergeLayers:
    """Test the tier bookkeeping of merged values."""

    def test_settings_record_their_tier(self):
        """Test that each field remembers which tier set it."""
        merged = merge_layers([
            LinkConfigLayer(Priority.BASELINE, BASELINE),
            LinkConfigLayer(Priority.OVERRIDE, {"Network": {"DHCP": False}}),
        ])

        assert merged["Network"]["DHCP"] == Setting(False, Priority.OVERRIDE)
        assert merged["Network"]["MulticastDNS"] == Setting(True, Priority.BASELINE)
        assert strip_priorities(merged)["Network"]["DHCP"] is False

    def test_nix_modifiers(self):
        """Test the module system function of each tier."""
        assert Priority.BASELINE.nix_modifier == "mkDefault"
        assert Priority.DEFAULT.nix_modifier == "mkDefault"
        assert Priority.OVERRIDE.nix_modifier is None
        assert Priority.FORCED.nix_modifier == "mkForce"
        assert Priority.BASELINE < Priority.DEFAULT < Priority.OVERRIDE < Priority.FORCED
