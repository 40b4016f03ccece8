"""Running several ops concurrently on the same input."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from .op import Op


@dataclass(frozen=True)
class Parallel(Op):
    """Runs ``op1`` and ``op2`` concurrently on the same input.

    The result is the pair of their outputs. If either op raises, the
    other is cancelled and the exception propagates.
    """

    op1: Op
    op2: Op

    async def call(self, value: Any) -> Any:
        first = asyncio.ensure_future(self.op1.call(value))
        second = asyncio.ensure_future(self.op2.call(value))
        try:
            left, right = await asyncio.gather(first, second)
        except BaseException:
            for task in (first, second):
                task.cancel()
            await asyncio.gather(first, second, return_exceptions=True)
            raise
        return left, right


def _nest(ops: tuple[Op, ...]) -> Op:
    if len(ops) < 2:
        raise ValueError(f"at least two ops are needed, got {len(ops)}")
    head, *rest = ops
    if len(rest) == 1:
        return Parallel(head, rest[0])
    return Parallel(head, _nest(tuple(rest)))


def _flattener(count: int):
    def flatten(output: Any) -> tuple[Any, ...]:
        values = []
        for _ in range(count - 1):
            head, output = output
            values.append(head)
        values.append(output)
        return tuple(values)

    return flatten


def parallel(*args: Op) -> Op:
    """Combine two or more ops into one that runs them all concurrently.

    The combined op returns a flat tuple of the outputs, in argument order.
    """
    return _nest(args).map(_flattener(len(args)))


def try_parallel(*args: Op) -> Op:
    """Like :func:`parallel`, for fallible ops.

    The first failure raised by any op propagates and the rest are cancelled.
    """
    return _nest(args).map_ok(_flattener(len(args)))