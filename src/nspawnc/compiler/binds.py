"""Bind mount normalization and serialization."""

import logging
import posixpath
from typing import Dict, List, Mapping, Tuple

from nspawnc.errors import InvalidBindSpec
from nspawnc.models.artifacts import BindLists
from nspawnc.models.container import BindSpec


logger = logging.getLogger(__name__)

DEFAULT_STORE_DIR = "/nix/store"


def store_bind(store_dir: str = DEFAULT_STORE_DIR) -> BindSpec:
    """Read-only, ID-mapped bind of the host package store."""
    return BindSpec(host_path=store_dir, read_only=True, options=["idmap"])


def _normalize(container: str, path: str, field: str) -> str:
    if not posixpath.isabs(path):
        raise InvalidBindSpec(f"Bind path '{path}' must be absolute", container=container, field=field)
    if ":" in path:
        raise InvalidBindSpec(f"Bind path '{path}' must not contain ':'", container=container, field=field)
    normalized = posixpath.normpath(path)
    # normpath keeps a leading double slash
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def serialize_bind(container_path: str, spec: BindSpec) -> str:
    """Render one bind as ``hostPath:containerPath[:opt1,opt2]``."""
    host_path = spec.host_path if spec.host_path is not None else container_path
    entry = f"{host_path}:{container_path}"
    if spec.options:
        entry += ":" + ",".join(spec.options)
    return entry


def normalize_binds(
    container: str,
    binds: Mapping[str, BindSpec],
    store_dir: str = DEFAULT_STORE_DIR,
) -> Dict[str, BindSpec]:
    """Validate declared binds and add the store bind.

    Raises InvalidBindSpec when two entries end up at the same container
    path, including a declared entry at the store path.
    """
    normalized: Dict[str, BindSpec] = {}
    for container_path, spec in binds.items():
        field = f"binds.{container_path}"
        path = _normalize(container, container_path, field)
        for option in spec.options:
            if not option or "," in option or ":" in option:
                raise InvalidBindSpec(
                    f"Bind option '{option}' must be non-empty and contain neither ',' nor ':'",
                    container=container,
                    field=f"{field}.options",
                )
        if spec.host_path is not None:
            spec = spec.model_copy(update={"host_path": _normalize(container, spec.host_path, f"{field}.host_path")})
        if path in normalized:
            raise InvalidBindSpec(
                f"Duplicate bind for container path '{path}'", container=container, field=field
            )
        normalized[path] = spec

    store_path = posixpath.normpath(store_dir)
    if store_path in normalized:
        raise InvalidBindSpec(
            f"Container path '{store_path}' is reserved for the package store",
            container=container,
            field=f"binds.{store_path}",
        )
    normalized[store_path] = store_bind(store_path)
    return normalized


def resolve_binds(
    container: str,
    binds: Mapping[str, BindSpec],
    store_dir: str = DEFAULT_STORE_DIR,
) -> BindLists:
    """Partition binds into read-write and read-only lists."""
    read_write: List[Tuple[str, str]] = []
    read_only: List[Tuple[str, str]] = []

    for path, spec in normalize_binds(container, binds, store_dir).items():
        target = read_only if spec.read_only else read_write
        target.append((path, serialize_bind(path, spec)))

    result = BindLists(
        read_write=[entry for _, entry in sorted(read_write)],
        read_only=[entry for _, entry in sorted(read_only)],
    )
    logger.debug(
        f"Container {container}: {len(result.read_write)} read-write, "
        f"{len(result.read_only)} read-only binds"
    )
    return result
