from dataclasses import dataclass

import pytest

from opchain.agent_ops import lookup
from opchain.op import passthrough
from opchain.parallel import parallel
from opchain.pipeline import ChainError, PipelineBuilder, new, with_error

pytestmark = pytest.mark.asyncio

QUERY = "What is a flurbo?"


class Backend:
    """Answers prompts and document lookups; may be told to fail lookups."""

    def __init__(self, broken=False):
        self.broken = broken

    async def prompt(self, text):
        return f"Mock response: {text}"

    async def top_n(self, query, n):
        if self.broken:
            raise RuntimeError("index unavailable")
        return [(1.0, "doc1", {"foo": "bar"})]


@dataclass
class Sentiment:
    score: float


class SentimentExtractor:
    async def extract(self, text):
        return Sentiment(score=0.9 if "love" in text else 0.1)


async def _username(email):
    return email.split("@")[0]


async def _greet(name):
    return f"Hello, {name}!"


def _rag_text(pair):
    return f"User query: {pair[0]}\n\nTop documents:\n{pair[1][0][2]['foo']}"


async def test_prompt_pipeline():
    chain = new().map(lambda v: f"User query: {v}").prompt(Backend())
    assert await chain.call(QUERY) == "Mock response: User query: What is a flurbo?"


async def test_prompt_pipeline_with_error():
    chain = with_error(ValueError).map(lambda v: f"User query: {v}").prompt(Backend())
    assert await chain.call(QUERY) == "Mock response: User query: What is a flurbo?"


async def test_lookup_pipeline():
    chain = new().lookup(Backend(), 1).map_ok(lambda d: f"Top documents:\n{d[0][2]['foo']}")
    assert await chain.call(QUERY) == "Top documents:\nbar"


async def test_rag_pipeline():
    chain = (
        new()
        .chain(parallel(passthrough(), lookup(Backend(), 1)))
        .map(_rag_text)
        .prompt(Backend())
    )
    assert (
        await chain.call(QUERY)
        == "Mock response: User query: What is a flurbo?\n\nTop documents:\nbar"
    )


async def test_then_pipeline():
    chain = new().then(_username).then(_greet)
    assert await chain.call("bob@example.com") == "Hello, bob!"


async def test_map_pair_pipeline():
    chain = new().map(lambda p: p[0] + p[1]).map(lambda z: f"Result: {z}!")
    assert await chain.call((1, 2)) == "Result: 3!"


async def test_extract_pipeline():
    chain = (
        new()
        .map(lambda t: f"Analyze the sentiment of the following text: {t}!")
        .chain(new().extract(SentimentExtractor()))
    )
    assert await chain.call("I love ice cream!") == Sentiment(score=0.9)


async def test_chain_then_map():
    chain = new().chain(passthrough()).map(lambda x: x + 1)
    assert await chain.call(1) == 2


async def test_with_error_records_type():
    assert with_error(ValueError).error_type is ValueError
    assert new() == PipelineBuilder(ChainError)


async def test_chain_returns_given_op():
    op = passthrough()
    assert new().chain(op) is op


async def test_chain_rejects_non_op():
    with pytest.raises(TypeError):
        new().chain(lambda x: x)


async def test_lookup_failure_propagates():
    chain = new().lookup(Backend(broken=True), 1).map_ok(len)
    with pytest.raises(RuntimeError, match="index unavailable"):
        await chain.call("query")


async def test_lookup_failure_mapped_to_chain_error():
    chain = new().lookup(Backend(broken=True), 1).map_err(lambda e: ChainError("lookup", e))
    with pytest.raises(ChainError) as info:
        await chain.call("query")
    assert str(info.value) == "Failed to lookup documents: index unavailable"
    assert info.value.kind == "lookup"
    assert isinstance(info.value.cause, RuntimeError)


async def test_prompt_rejects_non_string():
    with pytest.raises(TypeError):
        await new().prompt(Backend()).call(42)


async def test_chain_error_prompt_message():
    err = ChainError("prompt", ValueError("boom"))
    assert str(err) == "Failed to prompt agent: boom"
    assert err.__cause__ is err.cause


async def test_chain_error_unknown_kind():
    with pytest.raises(ValueError):
        ChainError("other", ValueError("boom"))