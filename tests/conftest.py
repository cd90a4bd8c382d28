"""Pytest configuration and shared fixtures."""
import asyncio
import json

import httpx
import pytest

from parley.events.models import Chunk, EndAnswer, LLMToken, StartAnswer
from parley.llm.base import LLMClient


class RecordingSink:
    """EventSink that keeps every event, optionally reacting to each one."""

    def __init__(self, on_event=None):
        self.events = []
        self._on_event = on_event

    def send(self, event):
        self.events.append(event)
        if self._on_event is not None:
            self._on_event(event)

    @property
    def answers(self):
        """The AnswerEvents, unwrapped from their LLMToken."""
        return [event.answer for event in self.events if isinstance(event, LLMToken)]

    @property
    def chunks(self):
        return [answer.text for answer in self.answers if isinstance(answer, Chunk)]


class ScriptedLLM(LLMClient):
    """Backend that streams a fixed list of chunks.

    With a gate, it stops after the first chunk until the gate is set, so
    tests can act while the answer is in flight.
    """

    name = "scripted"

    def __init__(self, chunks=(), error=None, gate=None, **kwargs):
        super().__init__(**kwargs)
        self.chunks = list(chunks)
        self.error = error
        self.gate = gate
        self.requests = []
        self.closed = False

    async def _stream_answer(self, event_sink, cancel):
        self.requests.append(self.conversation())
        for i, chunk in enumerate(self.chunks):
            if cancel.cancelled:
                return
            event_sink.send(LLMToken(Chunk(chunk)))
            if i == 0 and self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
        if self.error is not None:
            raise self.error

    async def close(self):
        self.closed = True


class StreamServer:
    """httpx.MockTransport serving one canned streamed body per request."""

    def __init__(self, body_chunks, status_code=200, error=None):
        self.body_chunks = [c.encode() if isinstance(c, str) else c for c in body_chunks]
        self.status_code = status_code
        self.error = error
        self.requests = []

    def _handle(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error

        async def body():
            for chunk in self.body_chunks:
                yield chunk
                await asyncio.sleep(0)

        return httpx.Response(self.status_code, content=body())

    @property
    def transport(self):
        return httpx.MockTransport(self._handle)

    def last_json(self):
        return json.loads(self.requests[-1].content)


def assert_answer_invariant(answers):
    """One StartAnswer, then only Chunks, then one EndAnswer."""
    assert answers, "no answer events"
    assert isinstance(answers[0], StartAnswer)
    assert isinstance(answers[-1], EndAnswer)
    assert all(isinstance(a, Chunk) for a in answers[1:-1])


@pytest.fixture
def sink():
    """A fresh recording event sink."""
    return RecordingSink()


@pytest.fixture
def recording_sink():
    """Factory for recording sinks with an event callback."""
    return RecordingSink


@pytest.fixture
def scripted_llm():
    """Factory for scripted LLM clients."""
    return ScriptedLLM


@pytest.fixture
def stream_server():
    """Factory for mock streaming HTTP servers."""
    return StreamServer


@pytest.fixture
def answer_invariant():
    return assert_answer_invariant
