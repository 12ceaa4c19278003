"""Cache path helpers.

Artifacts live beside their sources: ``<sourceDir>/.cache/<checksum>-<name>.<ext>``.
The path depends only on the source basename and its checksum, never on the
generated content.
"""

from pathlib import Path
from typing import Union

CACHE_DIRNAME = ".cache"
DEFAULT_EXTENSION = "tsx"

PathLike = Union[str, Path]


def cache_dir_for(source_path: PathLike) -> Path:
	"""Return the cache directory scoped to the directory of ``source_path``."""
	return Path(source_path).parent / CACHE_DIRNAME


def artifact_name(source_name: str, checksum: str, ext: str = DEFAULT_EXTENSION) -> str:
	"""Return the artifact filename for a source basename.

	Example: 31fd892d997bbfea0ea337e6d8caff8c-Counter.promptx.tsx
	"""
	return f"{checksum}-{source_name}.{ext.lstrip('.')}"


def artifact_path(source_path: PathLike, checksum: str, ext: str = DEFAULT_EXTENSION) -> Path:
	source = Path(source_path)
	return cache_dir_for(source) / artifact_name(source.name, checksum, ext)


def owns_artifact(filename: str, source_name: str) -> bool:
	"""True when ``filename`` is an artifact generated from ``source_name``.

	Only ``<checksum>-<source_name>.<ext>`` names match, so ``MyCounter.promptx``
	artifacts are never attributed to ``Counter.promptx``. Dotfiles (in-flight
	temporary writes) never match.
	"""
	if filename.startswith("."):
		return False
	digest, sep, rest = filename.partition("-")
	if not sep or not digest:
		return False
	return rest.startswith(f"{source_name}.")


__all__ = [
	"CACHE_DIRNAME",
	"DEFAULT_EXTENSION",
	"artifact_name",
	"artifact_path",
	"cache_dir_for",
	"owns_artifact",
]
