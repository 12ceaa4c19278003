"""Plugin options and their YAML loader."""
from __future__ import annotations
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ValidationError

from .cache import DEFAULT_EXTENSION
from .errors import ConfigError

DEFAULT_CONFIG_FILE = Path("config/promptx.yaml")


class PromptxOptions(BaseModel):
    # litellm model id, e.g. anthropic/claude-3-5-haiku-latest
    model: Optional[str] = None
    system_prompt: Optional[str] = None
    # accepted for compatibility, currently has no effect on generation
    typescript: bool = True
    extension: str = DEFAULT_EXTENSION
    max_tokens: int = 2000
    temperature: Optional[float] = None


def load_options(path: Union[str, Path, None] = None, **overrides) -> PromptxOptions:
    """Read options from a YAML file, then apply non-None ``overrides``.

    A missing file is only an error when ``path`` was given explicitly.
    """
    data = {}
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_FILE
    if cfg_path.exists():
        try:
            with open(cfg_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {cfg_path}")
    elif path is not None:
        raise ConfigError(f"Config file not found: {cfg_path}")
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return PromptxOptions(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid promptx options: {e}") from e


__all__ = ["PromptxOptions", "load_options", "DEFAULT_CONFIG_FILE"]
