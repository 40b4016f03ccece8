"""Core operation type and the basic sequential combinators."""

from __future__ import annotations

import abc
import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable


class Op(abc.ABC):
    """A unit of asynchronous work that turns one input into one output.

    Ops compose: every combinator method returns a new op that runs this
    one first and feeds its output onward.
    """

    @abc.abstractmethod
    async def call(self, value: Any) -> Any:
        """Run the op on ``value`` and return its output."""

    async def batch_call(self, n: int, inputs: Iterable[Any]) -> list[Any]:
        """Run the op on every input, at most ``n`` at a time.

        Outputs keep the order of the inputs. A call that raises appears in
        the list as the exception it raised.
        """
        return await self._run_buffered(n, inputs, capture=True)

    async def try_batch_call(self, n: int, inputs: Iterable[Any]) -> list[Any]:
        """Run the op on every input, at most ``n`` at a time.

        Outputs keep the order of the inputs. The first failure, in input
        order, is raised and the calls still pending are cancelled.
        """
        return await self._run_buffered(n, inputs, capture=False)

    async def _run_buffered(
        self, n: int, inputs: Iterable[Any], *, capture: bool
    ) -> list[Any]:
        if n < 1:
            raise ValueError(f"concurrency must be at least 1, got {n}")
        pending: deque[asyncio.Future[Any]] = deque()
        results: list[Any] = []

        async def collect_head() -> None:
            task = pending.popleft()
            if capture:
                try:
                    results.append(await task)
                except Exception as exc:  # noqa: BLE001 - kept as a result
                    results.append(exc)
            else:
                results.append(await task)

        try:
            for value in inputs:
                pending.append(asyncio.ensure_future(self.call(value)))
                if len(pending) >= n:
                    await collect_head()
            while pending:
                await collect_head()
        finally:
            if pending:
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
        return results

    def map(self, f: Callable[[Any], Any]) -> Sequential:
        """Feed this op's output through the plain function ``f``."""
        return Sequential(self, Map(f))

    def then(self, f: Callable[[Any], Awaitable[Any]]) -> Sequential:
        """Feed this op's output through the async function ``f``."""
        return Sequential(self, Then(f))

    def chain(self, op: Op) -> Sequential:
        """Feed this op's output into another op."""
        return Sequential(self, op)

    def lookup(self, index: Any, n: int) -> Sequential:
        """Use this op's output as a query for the top ``n`` documents of ``index``."""
        from .agent_ops import Lookup

        return Sequential(self, Lookup(index, n))

    def prompt(self, prompt: Any) -> Sequential:
        """Use this op's output as a prompt for ``prompt`` and return its reply."""
        from .agent_ops import Prompt

        return Sequential(self, Prompt(prompt))

    def map_ok(self, f: Callable[[Any], Any]) -> Op:
        """Transform the output with ``f`` when this op succeeds."""
        from .try_op import MapOk

        return MapOk(self, Map(f))

    def map_err(self, f: Callable[[Any], Any]) -> Op:
        """Transform the error with ``f`` when this op fails."""
        from .try_op import MapErr

        return MapErr(self, Map(f))

    def and_then(self, f: Callable[[Any], Awaitable[Any]]) -> Op:
        """Continue with the async function ``f`` when this op succeeds."""
        from .try_op import AndThen

        return AndThen(self, Then(f))

    def or_else(self, f: Callable[[Any], Awaitable[Any]]) -> Op:
        """Recover with the async function ``f`` when this op fails."""
        from .try_op import OrElse

        return OrElse(self, Then(f))

    def chain_ok(self, op: Op) -> Op:
        """Feed the output into ``op`` when this op succeeds."""
        from .try_op import TrySequential

        return TrySequential(self, op)


@dataclass(frozen=True)
class Sequential(Op):
    """Runs ``prev`` and then ``op`` on its output."""

    prev: Op
    op: Op

    async def call(self, value: Any) -> Any:
        return await self.op.call(await self.prev.call(value))


@dataclass(frozen=True)
class Map(Op):
    """Applies a plain function to the input."""

    f: Callable[[Any], Any]

    async def call(self, value: Any) -> Any:
        return self.f(value)


@dataclass(frozen=True)
class Then(Op):
    """Applies an async function to the input and awaits the result."""

    f: Callable[[Any], Awaitable[Any]]

    async def call(self, value: Any) -> Any:
        return await self.f(value)


@dataclass(frozen=True)
class Passthrough(Op):
    """Returns its input unchanged."""

    async def call(self, value: Any) -> Any:
        return value


def map(f: Callable[[Any], Any]) -> Map:  # noqa: A001 - part of the public API
    """Create an op that applies the plain function ``f``."""
    return Map(f)


def then(f: Callable[[Any], Awaitable[Any]]) -> Then:
    """Create an op that applies and awaits the async function ``f``."""
    return Then(f)


def passthrough() -> Passthrough:
    """Create an op that returns its input unchanged."""
    return Passthrough()