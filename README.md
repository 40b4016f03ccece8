# opchain

Composable asynchronous pipelines built from small operations ("ops").

Every op is a subclass of `opchain.op.Op` and has one async method,
`call(value)`. Ops are combined into larger ops. They can run one after
another, where each output becomes the next input. They can run side by side
on the same input. They can also react to success or failure. A pipeline is
itself an op, so you run it with `await pipeline.call(value)`.

## Installation

```
pip install opchain
```

To run the test suite:

```
pip install "opchain[test]"
pytest
```

## Sequential pipelines

`opchain.pipeline.new()` returns a `PipelineBuilder`. Each builder method
returns the first op of the pipeline. From there, the op's own methods
extend the pipeline.

```python
import asyncio
from opchain.pipeline import new

pipeline = (
    new()
    .map(lambda pair: pair[0] + pair[1])
    .map(lambda z: f"Result: {z}!")
)

print(asyncio.run(pipeline.call((1, 2))))  # Result: 3!
```

`then` works like `map`, but takes a coroutine function:

```python
async def username(email):
    return email.split("@")[0]

async def greet(name):
    return f"Hello, {name}!"

pipeline = new().then(username).then(greet)
asyncio.run(pipeline.call("bob@example.com"))  # "Hello, bob!"
```

`chain` appends any `Op`, including ones you write yourself.
`PipelineBuilder.chain` raises `TypeError` if it is given something that is
not an `Op`.

```python
from opchain.op import Op

class AddOne(Op):
    async def call(self, value):
        return value + 1

asyncio.run(new().chain(AddOne()).call(1))  # 2
```

The building blocks live in `opchain.op`: `Sequential(prev, op)`, `Map(f)`,
`Then(f)` and `Passthrough()`. The factory functions `map(f)`, `then(f)` and
`passthrough()` create the last three.

## Parallel operations

`opchain.parallel.parallel(*ops)` takes two or more ops and builds one op
from them. That op passes the same input to every op, runs them concurrently
and returns their outputs as a flat tuple, in argument order. It raises
`ValueError` if you give it fewer than two ops.

```python
from opchain.op import map, passthrough
from opchain.parallel import parallel

pipeline = parallel(
    passthrough(),
    map(lambda x: x * 2),
    map(lambda x: f"{x} is the number!"),
)

asyncio.run(pipeline.call(1))  # (1, 2, "1 is the number!")
```

`Parallel(op1, op2)` is the two-op building block and returns a pair.
Nesting it gives nested pairs. If either op raises, the other one is
cancelled and the exception propagates. `try_parallel(*ops)` does the same
as `parallel`, but flattens the result with `map_ok`.

## Fallible operations

An op fails by raising an exception. The error-aware methods on `Op`, which
are implemented in `opchain.try_op`, act on either path:

- `map_ok(f)` transforms the result with `f` when the op succeeds.
- `map_err(f)` calls `f` with the raised exception. `f` must return an
  exception, which is then raised in place of the original one. If `f`
  returns anything else, a `TypeError` is raised.
- `and_then(f)` awaits the coroutine function `f` on the result.
- `or_else(f)` awaits the coroutine function `f` on the raised exception.
  Whatever `f` returns becomes the result, and whatever it raises propagates.
- `chain_ok(op)` feeds the result into another op.

## Batches

`batch_call(n, inputs)` and `try_batch_call(n, inputs)` run an op on many
inputs, at most `n` at a time. Both return the outputs in input order. They
differ in how they handle failures:

- `batch_call` puts the exception that a call raised into the list, in the
  place of that call's output.
- `try_batch_call` raises the first failure in input order and cancels the
  calls that are still pending.

Both raise `ValueError` if `n` is less than 1.

## AI operations

`opchain.agent_ops` provides three ops. Each one wraps an object that you
supply:

- `lookup(index, n)` / `Lookup`: the index has an async `top_n(query, n)`
  that returns `(score, id, document)` triples. The op returns them as a list.
- `prompt(model)` / `Prompt`: the model has an async `prompt(text)`. The op
  returns the model's reply.
- `extract(extractor)` / `Extract`: the extractor has an async
  `extract(text)`. The op returns what the extractor returns.

All three expect a string input and raise `TypeError` otherwise. The same
ops are available as methods of `PipelineBuilder`, and `lookup` and `prompt`
are also methods of `Op`:

```python
pipeline = (
    new()
    .map(lambda q: f"User query: {q}")
    .prompt(model)
)
```

## Error types

`opchain.pipeline.ChainError` is an exception class with a `kind` of
`"prompt"` or `"lookup"` and a `cause`. Its message begins with
"Failed to prompt agent" or "Failed to lookup documents". `new()` records
`ChainError` as the builder's `error_type`. `with_error(error_type)` records
a different type. The recorded type is informational only. No op in the
package wraps failures in it, so exceptions from an index, model or
extractor propagate unchanged.

## What this package does not do

It has no model clients, vector stores or extractors of its own. Lookup,
prompt and extract ops work only with objects you provide. It has no command
line interface.