"""LLM component generation layer."""
from __future__ import annotations
import re, time
import logging
from pathlib import Path
from typing import Optional, Protocol, Union
import litellm

from .errors import GenerationError

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".promptx"

SYSTEM_PROMPT = (
    "You are an expert React developer. Convert the following prompt text into a modern React component.\n"
    "The component should:\n"
    "1. Include proper TypeScript types\n"
    "2. Handle loading and error states\n"
    "3. Follow React best practices\n"
    "4. Use modern React patterns\n"
    "5. Be well-documented with JSDoc comments\n"
    "6. Export the component as a default export"
)

USER_PROMPT_TEMPLATE = (
    "Create a React component named {name} that uses the following prompt text: \n\n"
    "{text}\n\n"
    "Only return the code for the component, nothing else. "
    "Ensure the code is within a single code block."
)

FENCE_RE = re.compile(r"```(?:\w+)?\n([\s\S]*?)\n```")


class GeneratorAdapter(Protocol):
    """Anything that can turn prompt text into component source."""

    async def generate(self, text: str, name: str, system_prompt: Optional[str] = None) -> str:
        ...


def component_name(source_path: Union[str, Path]) -> str:
    """``my-counter.promptx`` -> ``MyCounter``."""
    stem = Path(source_path).name
    if stem.endswith(SOURCE_SUFFIX):
        stem = stem[: -len(SOURCE_SUFFIX)]
    return "".join(part[:1].upper() + part[1:] for part in stem.split("-"))


def clean_generation(raw: str) -> str:
    # Exactly one fenced block -> its body; anything else passes through untouched
    blocks = FENCE_RE.findall(raw)
    if len(blocks) == 1:
        return blocks[0].strip()
    return raw


class LiteLLMGenerator:
    """``GeneratorAdapter`` backed by ``litellm.acompletion``.

    One request per call; no retries and no timeout beyond whatever the
    provider applies.
    """

    def __init__(
        self,
        model: str,
        max_tokens: int = 2000,
        temperature: Optional[float] = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate(self, text: str, name: str, system_prompt: Optional[str] = None) -> str:
        litellm.drop_params = True
        start = time.time()
        try:
            resp = await litellm.acompletion(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt or SYSTEM_PROMPT},
                    {"role": "user", "content": USER_PROMPT_TEMPLATE.format(name=name, text=text)},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            raise GenerationError(f"Generation failed for {name} with {self.model}: {e}") from e
        elapsed = time.time() - start

        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise GenerationError(f"Malformed response for {name} from {self.model}") from e
        if not content:
            raise GenerationError(f"Empty response for {name} from {self.model}")

        usage = getattr(resp, "usage", None)
        total_tokens = getattr(usage, "total_tokens", None) if usage is not None else None
        logger.info("Generated %s with %s in %.2fs (tokens=%s)", name, self.model, elapsed, total_tokens)
        return content


__all__ = [
    "GeneratorAdapter",
    "LiteLLMGenerator",
    "SYSTEM_PROMPT",
    "clean_generation",
    "component_name",
]
