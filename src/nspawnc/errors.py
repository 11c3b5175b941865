"""Compiler error kinds.

Every error aborts the whole resolution pass and names the container and
field the operator has to fix.
"""

from typing import Optional


class CompilerError(Exception):
    """Base class for all resolution errors."""

    def __init__(self, message: str, container: Optional[str] = None, field: Optional[str] = None):
        self.container = container
        self.field = field
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        location = []
        if self.container:
            location.append(f"container '{self.container}'")
        if self.field:
            location.append(f"field '{self.field}'")
        if location:
            return f"{message} ({', '.join(location)})"
        return message


class DuplicateContainerName(CompilerError):
    """Two definitions share one container name."""


class NameTooLong(CompilerError):
    """Composed interface name exceeds the kernel limit."""


class ConflictingSourceSpecification(CompilerError):
    """Both or neither of inline config and prebuilt path were given."""


class InvalidBindSpec(CompilerError):
    """A bind mount cannot be serialized or collides with another one."""


class ZoneConfigConflict(CompilerError):
    """Containers sharing a zone resolve to different host link configs."""


class DefinitionError(CompilerError):
    """A configuration file or definition failed to load or validate."""


class InlineEvaluationFailure(CompilerError):
    """The system evaluator failed to resolve an inline configuration."""

    def __init__(self, container: str, cause: str):
        self.cause = cause
        super().__init__(f"Inline evaluation failed: {cause}", container=container, field="config")
