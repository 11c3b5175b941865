"""Resolution pass over a container definition set."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Union

from nspawnc.compiler.binds import resolve_binds
from nspawnc.compiler.host import build_host_artifacts
from nspawnc.compiler.interfaces import allocate_interface
from nspawnc.compiler.network import resolve_link_configs
from nspawnc.compiler.units import build_unit
from nspawnc.errors import (
    CompilerError,
    ConflictingSourceSpecification,
    DuplicateContainerName,
    InlineEvaluationFailure,
    ZoneConfigConflict,
)
from nspawnc.evaluators.base import BaseEvaluator, Overlay
from nspawnc.models.artifacts import (
    ArtifactSet,
    BindLists,
    ContainerArtifacts,
    InterfaceAssignment,
    LinkConfig,
)
from nspawnc.models.config import NspawncConfig
from nspawnc.models.container import ContainerDefinition


logger = logging.getLogger(__name__)

Definitions = Union[Mapping[str, ContainerDefinition], Iterable[ContainerDefinition]]


@dataclass(frozen=True)
class ValidatedContainer:
    """Output of the validation phase for one container."""
    definition: ContainerDefinition
    interface: Optional[InterfaceAssignment]
    binds: BindLists


def index_definitions(definitions: Definitions) -> Dict[str, ContainerDefinition]:
    """Key definitions by name, rejecting duplicates."""
    if isinstance(definitions, Mapping):
        indexed = {}
        for key, definition in definitions.items():
            if key != definition.name:
                raise CompilerError(
                    f"Definition is registered under '{key}' but named '{definition.name}'",
                    container=key,
                    field="name",
                )
            indexed[key] = definition
        return indexed

    indexed = {}
    for definition in definitions:
        if definition.name in indexed:
            raise DuplicateContainerName(
                "Container is defined more than once", container=definition.name, field="name"
            )
        indexed[definition.name] = definition
    return indexed


class Compiler:
    """Compiles container definitions into host artifacts."""

    def __init__(self, config: Optional[NspawncConfig] = None, evaluator: Optional[BaseEvaluator] = None):
        """Initialize compiler.

        ``evaluator`` is only required when some definition uses an inline
        configuration.
        """
        self.config = config or NspawncConfig()
        self.evaluator = evaluator

    def validate(self, definitions: Definitions) -> Dict[str, ValidatedContainer]:
        """Run every check that does not need inline evaluation."""
        indexed = index_definitions(definitions)
        validated = {}

        for name in sorted(indexed):
            definition = indexed[name]
            self._check_source(definition)
            validated[name] = ValidatedContainer(
                definition=definition,
                interface=allocate_interface(name, definition.network),
                binds=resolve_binds(name, definition.binds, self.config.host.store_dir),
            )

        return validated

    async def compile(
        self,
        definitions: Definitions,
        overlays: Optional[List[Overlay]] = None,
    ) -> ArtifactSet:
        """Perform one full resolution pass.

        Any error aborts the pass; a partial artifact set is never returned.
        """
        overlays = list(self.config.overlays if overlays is None else overlays)
        logger.info("Starting resolution pass")

        validated = self.validate(definitions)
        paths = await self._resolve_paths(validated, overlays)

        containers = {}
        for name, item in validated.items():
            definition = item.definition
            links = resolve_link_configs(item.interface, definition.network)
            containers[name] = ContainerArtifacts(
                name=name,
                path=paths[name],
                interface=item.interface,
                host_network=links.host if links else None,
                container_network=links.container if links else None,
                binds=item.binds,
                unit=build_unit(paths[name], item.binds, definition.network, item.interface),
            )

        artifacts = ArtifactSet(
            containers=containers,
            host_networks=self._host_networks(containers),
            host=build_host_artifacts(
                {name: item.definition for name, item in validated.items()},
                paths,
                self.config,
            ),
        )
        logger.info(f"Resolved {len(containers)} containers")
        return artifacts

    def _check_source(self, definition: ContainerDefinition):
        """Require exactly one of inline config and prebuilt path."""
        has_config = definition.config is not None
        has_path = definition.path is not None
        if has_config == has_path:
            detail = "both 'config' and 'path' are set" if has_config else "neither 'config' nor 'path' is set"
            raise ConflictingSourceSpecification(
                f"Exactly one system source is required, {detail}",
                container=definition.name,
                field="config",
            )

    async def _resolve_paths(
        self,
        validated: Mapping[str, ValidatedContainer],
        overlays: List[Overlay],
    ) -> Dict[str, str]:
        """Resolve the system path of every container."""
        paths = {
            name: item.definition.path
            for name, item in validated.items()
            if not item.definition.is_inline
        }
        inline = [item.definition for item in validated.values() if item.definition.is_inline]
        if not inline:
            return paths

        if self.evaluator is None:
            raise CompilerError(
                "Inline configuration requires an evaluator", container=inline[0].name, field="config"
            )

        semaphore = asyncio.Semaphore(self.config.compiler.max_parallel_evaluations)

        async def evaluate(definition: ContainerDefinition) -> str:
            async with semaphore:
                return await self.evaluator.resolve(definition, overlays)

        results = await asyncio.gather(
            *(evaluate(definition) for definition in inline),
            return_exceptions=True,
        )

        # inline is sorted by name, so the first failure is deterministic
        for definition, result in zip(inline, results):
            if isinstance(result, CompilerError):
                logger.error(f"Evaluation of {definition.name} failed")
                raise result
            if isinstance(result, Exception):
                logger.error(f"Evaluation of {definition.name} failed: {result}")
                raise InlineEvaluationFailure(definition.name, str(result)) from result
            if isinstance(result, BaseException):
                raise result
            paths[definition.name] = result

        return paths

    def _host_networks(self, containers: Mapping[str, ContainerArtifacts]) -> Dict[str, LinkConfig]:
        """Host-side .network payloads keyed by interface name."""
        networks: Dict[str, LinkConfig] = {}
        owners: Dict[str, str] = {}

        for name, artifacts in containers.items():
            if artifacts.interface is None:
                continue
            if_name = artifacts.interface.if_name
            if if_name in networks and networks[if_name] != artifacts.host_network:
                raise ZoneConfigConflict(
                    f"Host link config of {if_name} differs from the one of container "
                    f"'{owners[if_name]}' in the same zone",
                    container=name,
                    field="network.host",
                )
            networks.setdefault(if_name, artifacts.host_network)
            owners.setdefault(if_name, name)

        return networks
