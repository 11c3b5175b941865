"""Inline evaluation through the NixOS module system."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from nspawnc.errors import InlineEvaluationFailure
from nspawnc.evaluators.base import BaseEvaluator, Overlay
from nspawnc.evaluators.module import injected_module
from nspawnc.models.config import EvaluatorConfig
from nspawnc.models.container import ContainerDefinition
from nspawnc.utils.nix import nix_path, nix_string, to_nix
from nspawnc.utils.process import run_command
from nspawnc.utils.templates import render_template


logger = logging.getLogger(__name__)


EXPRESSION_TEMPLATE = """\
let
  hostPkgs = import {{ nixpkgs }} { };
  system = import "${toString hostPkgs.path}/nixos/lib/eval-config.nix" {
    system = null;
    prefix = [ "containers" {{ name }} ];
    modules = [
      ({ lib, ... }: {{ injected }})
{% for overlay in overlays %}
      {{ overlay }}
{% endfor %}
      ({ lib, ... }: {{ inline }})
    ];
  };
in
system.config.system.build.toplevel
"""


class NixEvaluator(BaseEvaluator):
    """Builds the system toplevel of an inline config with nix-build."""

    def __init__(self, config: Optional[EvaluatorConfig] = None, base_dir: Optional[Path] = None):
        """Initialize evaluator.

        Relative overlay paths are resolved against ``base_dir``.
        """
        self.config = config or EvaluatorConfig()
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()

    def _render_overlay(self, overlay: Overlay) -> str:
        if isinstance(overlay, dict):
            return to_nix(overlay)
        path = Path(overlay)
        if not path.is_absolute():
            path = self.base_dir / path
        return nix_path(str(path))

    def render_expression(self, definition: ContainerDefinition, overlays: List[Overlay]) -> str:
        """Render the Nix expression evaluating the container system."""
        return render_template(
            EXPRESSION_TEMPLATE,
            nixpkgs=self.config.nixpkgs,
            name=nix_string(definition.name),
            injected=to_nix(injected_module(definition)),
            overlays=[self._render_overlay(overlay) for overlay in overlays],
            inline=to_nix(definition.config or {}),
        )

    async def resolve(self, definition: ContainerDefinition, overlays: List[Overlay]) -> str:
        """Evaluate and build the container system, returning its store path."""
        try:
            expression = self.render_expression(definition, overlays)
        except (TypeError, ValueError) as e:
            raise InlineEvaluationFailure(definition.name, str(e)) from e

        logger.info(f"Evaluating inline configuration of {definition.name}")
        cmd = [*self.config.command, "--expr", expression]

        try:
            result = await run_command(cmd)
        except subprocess.CalledProcessError as e:
            cause = (e.stderr or "").strip() or f"{cmd[0]} exited with status {e.returncode}"
            raise InlineEvaluationFailure(definition.name, cause) from e
        except OSError as e:
            raise InlineEvaluationFailure(definition.name, f"Cannot run {cmd[0]}: {e}") from e

        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not lines:
            raise InlineEvaluationFailure(definition.name, f"{cmd[0]} printed no system path")

        path = lines[-1]
        logger.debug(f"Container {definition.name} resolved to {path}")
        return path
