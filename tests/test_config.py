import pytest

from promptx_build.config import load_options
from promptx_build.errors import ConfigError


def test_load_options_from_yaml(tmp_path):
    cfg = tmp_path / "promptx.yaml"
    cfg.write_text(
        "model: anthropic/claude-3-5-haiku-latest\n"
        "system_prompt: Write Vue instead\n"
        "typescript: false\n"
        "max_tokens: 1500\n",
        encoding="utf-8",
    )
    opts = load_options(cfg)
    assert opts.model == "anthropic/claude-3-5-haiku-latest"
    assert opts.system_prompt == "Write Vue instead"
    assert opts.typescript is False
    assert opts.max_tokens == 1500
    assert opts.extension == "tsx"


def test_overrides_win_over_file(tmp_path):
    cfg = tmp_path / "promptx.yaml"
    cfg.write_text("model: a\n", encoding="utf-8")
    assert load_options(cfg, model="b").model == "b"
    assert load_options(cfg, model=None).model == "a"


def test_default_file_is_optional(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    opts = load_options()
    assert opts.model is None


def test_explicit_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_options(tmp_path / "missing.yaml")


def test_invalid_yaml_and_values(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("model: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_options(bad)
    wrong = tmp_path / "wrong.yaml"
    wrong.write_text("max_tokens: lots\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_options(wrong)
    listy = tmp_path / "list.yaml"
    listy.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_options(listy)
