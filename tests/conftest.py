import asyncio

import pytest

from promptx_build.errors import GenerationError


class FakeGenerator:
    """Deterministic stand-in for the LLM adapter.

    ``replies`` is consumed in order; the last reply repeats. An exception
    instance in the list is raised instead of returned.
    """

    def __init__(self, replies=None, delay=0.0):
        self.replies = list(replies or ["export default function C() { return null }"])
        self.delay = delay
        self.calls = []

    async def generate(self, text, name, system_prompt=None):
        self.calls.append({"text": text, "name": name, "system_prompt": system_prompt})
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def failing_generator():
    return FakeGenerator([GenerationError("quota exceeded")])


@pytest.fixture
def prompt_dir(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    return src


def cache_files(directory):
    cache = directory / ".cache"
    if not cache.exists():
        return []
    return sorted(p.name for p in cache.iterdir())
