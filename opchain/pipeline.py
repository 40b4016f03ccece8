"""Entry points for building pipelines of ops.

A pipeline starts from a :class:`PipelineBuilder`, obtained with :func:`new`
or :func:`with_error`. The builder's methods each return the first op of
the pipeline. That op's own combinator methods extend the pipeline from
there.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from .agent_ops import Extract, Lookup, Prompt
from .op import Map, Op, Then

_MESSAGES = {
    "prompt": "Failed to prompt agent",
    "lookup": "Failed to lookup documents",
}


class ChainError(Exception):
    """A failure in a pipeline step that prompts an agent or looks up documents.

    ``kind`` is ``"prompt"`` or ``"lookup"``. ``cause`` is the underlying error.
    """

    def __init__(self, kind: str, cause: BaseException) -> None:
        if kind not in _MESSAGES:
            raise ValueError(
                f"unknown chain error kind {kind!r}; expected one of {sorted(_MESSAGES)}"
            )
        super().__init__(f"{_MESSAGES[kind]}: {cause}")
        self.kind = kind
        self.cause = cause
        self.__cause__ = cause


@dataclass(frozen=True)
class PipelineBuilder:
    """Starts a pipeline. Each method returns the pipeline's first op.

    ``error_type`` records the error type the pipeline is meant to report.
    """

    error_type: type = ChainError

    def map(self, f: Callable[[Any], Any]) -> Map:
        """Start the pipeline with the plain function ``f``."""
        return Map(f)

    def then(self, f: Callable[[Any], Awaitable[Any]]) -> Then:
        """Start the pipeline with the async function ``f``."""
        return Then(f)

    def chain(self, op: Op) -> Op:
        """Start the pipeline with an arbitrary op.

        Raises ``TypeError`` if ``op`` is not an :class:`Op`.
        """
        if not isinstance(op, Op):
            raise TypeError(f"expected an Op, got {type(op).__name__}")
        return op

    def lookup(self, index: Any, n: int) -> Lookup:
        """Start the pipeline with a lookup of the top ``n`` documents in ``index``."""
        return Lookup(index, n)

    def prompt(self, agent: Any) -> Prompt:
        """Start the pipeline by prompting ``agent`` with the input."""
        return Prompt(agent)

    def extract(self, extractor: Any) -> Extract:
        """Start the pipeline by extracting structured data with ``extractor``."""
        return Extract(extractor)


def new() -> PipelineBuilder:
    """Create a pipeline builder whose error type is :class:`ChainError`."""
    return PipelineBuilder(ChainError)


def with_error(error_type: type) -> PipelineBuilder:
    """Create a pipeline builder with a custom error type."""
    return PipelineBuilder(error_type)