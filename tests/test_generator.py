import pytest

from promptx_build import generator
from promptx_build.errors import GenerationError
from promptx_build.generator import LiteLLMGenerator, clean_generation, component_name


class DummyResp:
    def __init__(self, content):
        self.choices = [type("c", (), {"message": type("m", (), {"content": content})()})]
        self.usage = type("u", (), {"total_tokens": 30})()


def test_component_name():
    assert component_name("/src/Counter.promptx") == "Counter"
    assert component_name("my-contact-form.promptx") == "MyContactForm"
    assert component_name("plain") == "Plain"


def test_clean_generation_single_block():
    raw = "Sure!\n```tsx\nconst A = 1;\n```\n"
    assert clean_generation(raw) == "const A = 1;"


def test_clean_generation_block_without_language():
    assert clean_generation("```\nx\n```") == "x"


def test_clean_generation_passthrough():
    raw = "export default function A() {}"
    assert clean_generation(raw) == raw


def test_clean_generation_multiple_blocks_passthrough():
    raw = "```ts\na\n```\ntext\n```ts\nb\n```"
    assert clean_generation(raw) == raw


@pytest.mark.asyncio
async def test_litellm_generator_builds_messages(monkeypatch):
    captured = {}

    async def fake_acompletion(**kwargs):
        captured.update(kwargs)
        return DummyResp("```tsx\nexport default Counter;\n```")

    monkeypatch.setattr(generator.litellm, "acompletion", fake_acompletion)
    gen = LiteLLMGenerator("anthropic/claude-3-5-haiku-latest")
    out = await gen.generate("A button", "Counter")

    assert out == "```tsx\nexport default Counter;\n```"
    assert captured["model"] == "anthropic/claude-3-5-haiku-latest"
    assert captured["max_tokens"] == 2000
    system, user = captured["messages"]
    assert system == {"role": "system", "content": generator.SYSTEM_PROMPT}
    assert "named Counter" in user["content"]
    assert "A button" in user["content"]


@pytest.mark.asyncio
async def test_litellm_generator_system_prompt_override(monkeypatch):
    captured = {}

    async def fake_acompletion(**kwargs):
        captured.update(kwargs)
        return DummyResp("code")

    monkeypatch.setattr(generator.litellm, "acompletion", fake_acompletion)
    await LiteLLMGenerator("m", max_tokens=50).generate("t", "N", system_prompt="Custom")
    assert captured["messages"][0]["content"] == "Custom"
    assert captured["max_tokens"] == 50


@pytest.mark.asyncio
async def test_litellm_generator_wraps_errors(monkeypatch):
    async def fake_acompletion(**kwargs):
        raise RuntimeError("rate limited")

    monkeypatch.setattr(generator.litellm, "acompletion", fake_acompletion)
    with pytest.raises(GenerationError, match="rate limited"):
        await LiteLLMGenerator("m").generate("t", "N")


@pytest.mark.asyncio
async def test_litellm_generator_empty_reply(monkeypatch):
    async def fake_acompletion(**kwargs):
        return DummyResp("")

    monkeypatch.setattr(generator.litellm, "acompletion", fake_acompletion)
    with pytest.raises(GenerationError):
        await LiteLLMGenerator("m").generate("t", "N")
