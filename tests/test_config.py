from __future__ import annotations

import pytest

from nudge import config as config_module
from nudge.config import ConfigStore, get_config_store, load_config, parse_config, set_global_config_store


def _base(**overrides) -> dict:
    data = {
        "port": 55610,
        "log_level": "info",
        "llm_model": "anthropic/claude-haiku-4-5-20251001",
        "llm_timeout_seconds": 60,
        "api_tokens": {"secret-token": "local-user"},
    }
    data.update(overrides)
    return data


def test_defaults():
    cfg = parse_config(_base())
    assert cfg.log_level == "INFO"
    assert cfg.llm_log_level == "INFO"
    assert cfg.llm_api_key is None
    assert cfg.llm_max_tokens == 2000
    assert cfg.quick_add_default_due_days == 7
    assert cfg.duplicate_strategy == "substring"
    assert cfg.duplicate_token_overlap_threshold == 0.6
    assert cfg.api_tokens == {"secret-token": "local-user"}
    assert cfg.db_path.endswith("nudge.db")


def test_unknown_key_is_rejected():
    with pytest.raises(ValueError, match="unknown config key"):
        parse_config(_base(token="old-style"))


@pytest.mark.parametrize("missing", ["port", "log_level", "llm_model", "llm_timeout_seconds", "api_tokens"])
def test_required_keys(missing):
    data = _base()
    del data[missing]
    with pytest.raises(ValueError):
        parse_config(data)


@pytest.mark.parametrize(
    "overrides",
    [
        {"api_tokens": {}},
        {"api_tokens": {"secret-token": ""}},
        {"llm_timeout_seconds": 0},
        {"duplicate_strategy": "fuzzy"},
        {"duplicate_token_overlap_threshold": 1.5},
        {"quick_add_default_due_days": -1},
    ],
)
def test_invalid_values(overrides):
    with pytest.raises(ValueError):
        parse_config(_base(**overrides))


def test_relative_paths_resolve_under_app_root(tmp_path, monkeypatch):
    monkeypatch.setenv("NUDGE_HOME", str(tmp_path))
    cfg = parse_config(_base(db_path="data/custom.db"))
    assert cfg.db_path == str((tmp_path / "data" / "custom.db").resolve())


def test_load_config_from_file(tmp_path):
    path = tmp_path / "setting.toml"
    path.write_text(
        "\n".join(
            [
                "port = 8000",
                'log_level = "DEBUG"',
                'llm_model = "openai/gpt-4o-mini"',
                "llm_timeout_seconds = 30",
                'duplicate_strategy = "token_overlap"',
                "[api_tokens]",
                '"abc" = "alice"',
            ]
        ),
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.port == 8000
    assert cfg.duplicate_strategy == "token_overlap"
    assert cfg.api_tokens == {"abc": "alice"}


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")


def test_global_store_serves_the_loaded_config(monkeypatch):
    monkeypatch.setattr(config_module, "_config_store", None)
    with pytest.raises(RuntimeError):
        get_config_store()

    cfg = parse_config(_base())
    set_global_config_store(ConfigStore(cfg))

    assert get_config_store().config is cfg
