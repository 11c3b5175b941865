"""Base evaluator interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Union

from nspawnc.models.container import ContainerDefinition


Overlay = Union[str, Dict[str, Any]]


class BaseEvaluator(ABC):
    """Resolves an inline container configuration to a system path."""

    @abstractmethod
    async def resolve(self, definition: ContainerDefinition, overlays: List[Overlay]) -> str:
        """Evaluate the inline config of ``definition`` and return its system path.

        Raises InlineEvaluationFailure when evaluation fails.
        """
        pass
