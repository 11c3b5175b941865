"""Loading of compiler settings and container definitions."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from nspawnc.errors import DefinitionError, DuplicateContainerName
from nspawnc.evaluators.base import Overlay
from nspawnc.models.config import NspawncConfig
from nspawnc.models.container import ContainerDefinition


logger = logging.getLogger(__name__)


class ConfigManager:
    """Reads a configuration directory.

    Layout::

        config.yaml          compiler settings and overlays (optional)
        containers/*.yaml    ``containers:`` mappings of name -> definition
    """

    def __init__(self, config_dir: Path):
        """Initialize configuration manager."""
        self.config_dir = Path(config_dir)
        self.yaml = YAML(typ="safe")
        self.config: Optional[NspawncConfig] = None
        self.containers: Dict[str, ContainerDefinition] = {}
        self._sources: Dict[str, Path] = {}

    def load(self):
        """Load all configuration files."""
        logger.info(f"Loading configuration from {self.config_dir}")

        self._load_main_config()
        self._load_containers()

        logger.info(f"Loaded {len(self.containers)} container definitions")

    @property
    def overlays(self) -> List[Overlay]:
        """Overlays with relative paths resolved against the config dir."""
        if self.config is None:
            return []
        resolved: List[Overlay] = []
        for overlay in self.config.overlays:
            if isinstance(overlay, str) and not Path(overlay).is_absolute():
                resolved.append(str((self.config_dir / overlay).resolve()))
            else:
                resolved.append(overlay)
        return resolved

    def _load_main_config(self):
        """Load main configuration file."""
        config_file = self.config_dir / "config.yaml"
        if not config_file.exists():
            logger.warning(f"Main config not found, using defaults: {config_file}")
            self.config = NspawncConfig()
            return

        data = self._read_yaml(config_file) or {}
        try:
            self.config = NspawncConfig(**data)
        except ValidationError as e:
            raise DefinitionError(f"Invalid main config {config_file}: {e}") from e
        logger.debug(f"Loaded main config: {config_file}")

    def _load_containers(self):
        """Load container definitions."""
        containers_dir = self.config_dir / "containers"
        self.containers.clear()
        self._sources.clear()
        if not containers_dir.exists():
            logger.warning(f"Containers directory not found: {containers_dir}")
            return

        for yaml_file in sorted(containers_dir.glob("*.yaml")):
            data = self._read_yaml(yaml_file) or {}
            for name, spec in (data.get("containers") or {}).items():
                name = str(name)
                if name in self.containers:
                    raise DuplicateContainerName(
                        f"Container defined in both {self._sources[name]} and {yaml_file}",
                        container=name,
                        field="name",
                    )
                self.containers[name] = self._parse_definition(name, spec or {}, yaml_file)
                self._sources[name] = yaml_file
            logger.debug(f"Loaded containers from {yaml_file}")

    def _parse_definition(self, name: str, spec: Dict[str, Any], source: Path) -> ContainerDefinition:
        if not isinstance(spec, dict):
            raise DefinitionError(f"Definition in {source} must be a mapping", container=name)
        try:
            return ContainerDefinition(name=name, **spec)
        except ValidationError as e:
            raise DefinitionError(f"Invalid definition in {source}: {e}", container=name) from e
        except TypeError as e:
            raise DefinitionError(f"Invalid definition in {source}: {e}", container=name) from e

    def _read_yaml(self, file_path: Path) -> Any:
        """Read and parse YAML file."""
        try:
            data = self.yaml.load(file_path.read_text())
        except YAMLError as e:
            raise DefinitionError(f"Cannot parse {file_path}: {e}") from e
        if data is not None and not isinstance(data, dict):
            raise DefinitionError(f"Top level of {file_path} must be a mapping")
        return data
