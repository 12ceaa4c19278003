"""Build-hook surface consumed by the host bundler.

The host calls ``resolve_id`` to place ``.promptx`` imports in its module
graph, ``transform`` to obtain the generated component, and ``config`` /
``configure_server`` once at startup to register the extension, the loader
mapping and the file-watch glob.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .config import PromptxOptions
from .errors import ConfigError, PromptxError, ResolutionError
from .generator import SOURCE_SUFFIX, GeneratorAdapter, LiteLLMGenerator
from .pipeline import TransformPipeline
from .schema import TransformResult

logger = logging.getLogger(__name__)

PLUGIN_NAME = "vite-plugin-promptx"
WATCH_GLOB = f"**/*{SOURCE_SUFFIX}"


class PromptxPlugin:
    name = PLUGIN_NAME
    enforce = "pre"

    def __init__(self, pipeline: TransformPipeline, options: PromptxOptions) -> None:
        self.pipeline = pipeline
        self.options = options

    async def transform(self, content: str, id: str) -> Optional[TransformResult]:
        """Return generated code for a ``.promptx`` module, else ``None``.

        ``content`` is ignored: the source is re-read from disk so the
        checksum always reflects the file itself. Per-file failures are
        logged and turned into ``None`` so one prompt cannot abort the build.
        """
        if not id.endswith(SOURCE_SUFFIX):
            return None
        try:
            outcome = await self.pipeline.run(id)
        except PromptxError:
            logger.exception("Error processing promptx file %s", id)
            return None
        return TransformResult(code=outcome.code, map=None)

    async def resolve_id(self, id: str, importer: Optional[str] = None) -> Optional[str]:
        if not id.endswith(SOURCE_SUFFIX):
            return None
        if not (id.startswith(".") and importer):
            return None
        resolved = (Path(importer).parent / id).resolve()
        if not resolved.is_file():
            logger.error("File not found: %s", resolved)
            raise ResolutionError(f"Cannot find promptx file: {id} (resolved to {resolved})")
        logger.debug("Resolved promptx path: %s", resolved)
        return str(resolved)

    def config(self, host_config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        existing = ((host_config or {}).get("resolve") or {}).get("extensions") or []
        return {
            "resolve": {
                "extensions": [SOURCE_SUFFIX, *[e for e in existing if e != SOURCE_SUFFIX]],
            },
            "esbuild": {
                "include": r"\.promptx$",
                "loader": self.options.extension,
            },
            "jsx": "preserve",
        }

    def configure_server(self, server: Any) -> None:
        server.watcher.add(WATCH_GLOB)


def promptx_plugin(
    options: Optional[PromptxOptions] = None,
    generator: Optional[GeneratorAdapter] = None,
    transform_prompt: Optional[Callable[[str], str]] = None,
) -> PromptxPlugin:
    """Build a plugin instance.

    Raises ConfigError when neither ``generator`` nor ``options.model`` is
    provided.
    """
    options = options or PromptxOptions()
    if generator is None:
        if not options.model:
            raise ConfigError("language model is required for vite-plugin-prompt-components")
        generator = LiteLLMGenerator(
            options.model,
            max_tokens=options.max_tokens,
            temperature=options.temperature,
        )
    pipeline = TransformPipeline(
        generator,
        system_prompt=options.system_prompt,
        transform_prompt=transform_prompt,
        extension=options.extension,
    )
    return PromptxPlugin(pipeline, options)


__all__ = ["PromptxPlugin", "promptx_plugin", "PLUGIN_NAME", "WATCH_GLOB"]
