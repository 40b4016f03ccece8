"""Ops that query a vector index, prompt a model or extract structured data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .op import Op


def _as_text(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string input, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Lookup(Op):
    """Semantic search: returns the top ``n`` documents of ``index`` for a query.

    ``index`` must provide an async ``top_n(query, n)`` returning
    ``(score, id, document)`` triples.
    """

    index: Any
    n: int

    async def call(self, value: Any) -> list[tuple[float, str, Any]]:
        query = _as_text(value)
        return list(await self.index.top_n(query, self.n))


@dataclass(frozen=True)
class Prompt(Op):
    """Prompts ``agent`` with the input and returns its reply.

    ``agent`` must provide an async ``prompt(text)`` method.
    """

    agent: Any

    async def call(self, value: Any) -> str:
        return await self.agent.prompt(_as_text(value))


@dataclass(frozen=True)
class Extract(Op):
    """Extracts structured data from the input with ``extractor``.

    ``extractor`` must provide an async ``extract(text)`` method.
    """

    extractor: Any

    async def call(self, value: Any) -> Any:
        return await self.extractor.extract(_as_text(value))


def lookup(index: Any, n: int) -> Lookup:
    """Create an op returning the ``n`` documents of ``index`` closest to the input."""
    return Lookup(index, n)


def prompt(model: Any) -> Prompt:
    """Create an op that prompts ``model`` with the input and returns the reply."""
    return Prompt(model)


def extract(extractor: Any) -> Extract:
    """Create an op that extracts structured data from the input with ``extractor``."""
    return Extract(extractor)