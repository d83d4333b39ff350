"""User-invocable commands"""

from src.commands.define import (
    DefinitionCommand,
    DefinitionInvocation,
    InvocationOutcome,
    InvocationState,
    InvocationStatus,
)

__all__ = [
    "DefinitionCommand",
    "DefinitionInvocation",
    "InvocationOutcome",
    "InvocationState",
    "InvocationStatus",
]
