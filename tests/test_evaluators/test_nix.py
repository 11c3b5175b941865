"""Tests for the Nix evaluator."""

import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from nspawnc.errors import InlineEvaluationFailure
from nspawnc.evaluators.nix import NixEvaluator
from nspawnc.models.config import EvaluatorConfig
from nspawnc.models.container import ContainerDefinition


@pytest.fixture
def evaluator():
    """Create evaluator resolving overlays against a fixed directory."""
    return NixEvaluator(EvaluatorConfig(), base_dir=Path("/etc/nspawnc"))


@pytest.fixture
def definition():
    """Inline container definition."""
    return ContainerDefinition(
        name="web",
        config={"services": {"nginx": {"enable": True}}},
    )


class TestRenderExpression:
    """Test NixEvaluator.render_expression."""

    def test_module_order(self, evaluator, definition):
        """Test injected module, overlays, then the inline config."""
        expression = evaluator.render_expression(
            definition, ["common.nix", {"services": {"getty": {"helpLine": "hi"}}}]
        )

        injected = expression.index("lib.mkForce true")
        overlay_path = expression.index('(/. + "/etc/nspawnc/common.nix")')
        overlay_inline = expression.index('helpLine = "hi"')
        inline = expression.index("nginx = { enable = true; }")

        assert injected < overlay_path < overlay_inline < inline

    def test_expression_shape(self, evaluator, definition):
        """Test the eval-config call."""
        expression = evaluator.render_expression(definition, [])

        assert "hostPkgs = import <nixpkgs> { };" in expression
        assert 'prefix = [ "containers" "web" ];' in expression
        assert "system = null;" in expression
        assert 'hostName = (lib.mkDefault "web");' in expression
        assert "hostPlatform = (lib.mkDefault (hostPkgs.stdenv.hostPlatform));" in expression
        assert '"10-container-host0"' in expression
        assert expression.rstrip().endswith("system.config.system.build.toplevel")

    def test_absolute_overlay(self, evaluator, definition):
        """Test that absolute overlay paths are kept."""
        expression = evaluator.render_expression(definition, ["/srv/overlay.nix"])

        assert '(/. + "/srv/overlay.nix")' in expression

    def test_custom_nixpkgs(self, definition):
        """Test a pinned nixpkgs expression."""
        evaluator = NixEvaluator(EvaluatorConfig(nixpkgs="/srv/nixpkgs"))
        expression = evaluator.render_expression(definition, [])

        assert "hostPkgs = import /srv/nixpkgs { };" in expression


@pytest.mark.asyncio
class TestResolve:
    """Test NixEvaluator.resolve."""

    async def test_returns_last_output_line(self, evaluator, definition):
        """Test that the built store path is returned."""
        with patch("nspawnc.evaluators.nix.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = MagicMock(
                stdout="warning: something\n/nix/store/abc-nixos-system-web\n", stderr="", returncode=0
            )

            path = await evaluator.resolve(definition, [])

            assert path == "/nix/store/abc-nixos-system-web"
            cmd = mock_run.call_args[0][0]
            assert cmd[:2] == ["nix-build", "--no-out-link"]
            assert cmd[2] == "--expr"
            assert "eval-config.nix" in cmd[3]

    async def test_build_failure(self, evaluator, definition):
        """Test that a failing build becomes an evaluation failure."""
        error = subprocess.CalledProcessError(1, ["nix-build"])
        error.stdout = ""
        error.stderr = "error: The option `boot.isContainer' has conflicting definition values\n"

        with patch("nspawnc.evaluators.nix.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.side_effect = error

            with pytest.raises(InlineEvaluationFailure) as exc_info:
                await evaluator.resolve(definition, [])

        assert exc_info.value.container == "web"
        assert "conflicting definition values" in exc_info.value.cause

    async def test_missing_binary(self, evaluator, definition):
        """Test that a missing nix-build is reported per container."""
        with patch("nspawnc.evaluators.nix.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.side_effect = FileNotFoundError("nix-build")

            with pytest.raises(InlineEvaluationFailure) as exc_info:
                await evaluator.resolve(definition, [])

        assert "Cannot run nix-build" in exc_info.value.cause

    async def test_unrenderable_config(self, evaluator):
        """Test that a control character fails before nix-build runs."""
        definition = ContainerDefinition(
            name="web",
            config={"services": {"getty": {"helpLine": "bell\x07"}}},
        )

        with patch("nspawnc.evaluators.nix.run_command", new_callable=AsyncMock) as mock_run:
            with pytest.raises(InlineEvaluationFailure) as exc_info:
                await evaluator.resolve(definition, [])

        mock_run.assert_not_called()
        assert exc_info.value.container == "web"
        assert "control character" in exc_info.value.cause

    async def test_no_output(self, evaluator, definition):
        """Test that an empty result is a failure."""
        with patch("nspawnc.evaluators.nix.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = MagicMock(stdout="\n", stderr="", returncode=0)

            with pytest.raises(InlineEvaluationFailure):
                await evaluator.resolve(definition, [])
