"""Combinators for ops that can fail.

An op fails by raising an exception. These combinators act on the
success value or on the raised exception of the op they wrap.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .op import Op


async def _forward(prev: Op, op: Op, value: Any) -> Any:
    """Run ``prev`` and feed its output to ``op``; failures of ``prev`` propagate."""
    output = await prev.call(value)
    return await op.call(output)


@dataclass(frozen=True)
class MapOk(Op):
    """Transforms the success value of ``prev`` with ``op``."""

    prev: Op
    op: Op

    async def call(self, value: Any) -> Any:
        return await _forward(self.prev, self.op, value)


@dataclass(frozen=True)
class AndThen(Op):
    """Continues with the fallible ``op`` once ``prev`` has succeeded."""

    prev: Op
    op: Op

    async def call(self, value: Any) -> Any:
        return await _forward(self.prev, self.op, value)


@dataclass(frozen=True)
class TrySequential(Op):
    """Chains an arbitrary ``op`` after ``prev`` has succeeded."""

    prev: Op
    op: Op

    async def call(self, value: Any) -> Any:
        return await _forward(self.prev, self.op, value)


@dataclass(frozen=True)
class MapErr(Op):
    """Runs ``prev`` and, if it fails, turns the exception into another one.

    ``op`` receives the raised exception and must return the exception to
    raise in its place.
    """

    prev: Op
    op: Op

    async def call(self, value: Any) -> Any:
        try:
            return await self.prev.call(value)
        except Exception as err:
            replacement = await self.op.call(err)
            if not isinstance(replacement, BaseException):
                raise TypeError(
                    "error mapper must return an exception, "
                    f"got {type(replacement).__name__}"
                ) from err
            raise replacement from err


@dataclass(frozen=True)
class OrElse(Op):
    """Runs ``prev`` and, if it fails, hands the exception to ``op`` to recover.

    Whatever ``op`` returns becomes the result; whatever it raises propagates.
    """

    prev: Op
    op: Op

    async def call(self, value: Any) -> Any:
        try:
            return await self.prev.call(value)
        except Exception as err:
            return await self.op.call(err)