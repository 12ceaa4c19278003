"""promptx_build

Build-time transform that turns ``*.promptx`` prompt files into generated
components, caching every generation by the checksum of its source.

Primary entrypoints:
 - pipeline.py (checksum -> lookup -> generate -> write -> evict)
 - plugin.py (build-hook surface consumed by the host bundler)
 - generator.py (LLM generation adapter)
 - cli.py (Typer CLI)
"""

__all__ = [
    "cache",
    "checksum",
    "generator",
    "pipeline",
    "plugin",
    "store",
]
