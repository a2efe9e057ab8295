from pathlib import Path

import pytest

from fastaseq import config


def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in config.ENVIRONMENT_VARIABLES:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_collect_runtime_config_reads_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _isolate_env(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "NCBI_EMAIL=test@example.org",
                "NCBI_TOOL=fastaseq-tests",
                "NCBI_API_KEY='abc123'",
                "FASTASEQ_LINE_LENGTH=60",
            ]
        ),
        encoding="utf-8",
    )

    nested_dir = tmp_path / "nested" / "deeper"
    nested_dir.mkdir(parents=True)

    cfg = config.collect_runtime_config(start_path=nested_dir)

    assert cfg.ncbi_email == "test@example.org"
    assert cfg.ncbi_tool == "fastaseq-tests"
    assert cfg.ncbi_api_key == "abc123"
    assert cfg.line_length == 60
    assert list(cfg.missing_keys()) == []


def test_existing_environment_wins(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _isolate_env(monkeypatch)
    monkeypatch.setenv("NCBI_EMAIL", "shell@example.org")
    (tmp_path / ".env").write_text("NCBI_EMAIL=file@example.org\n", encoding="utf-8")
    cfg = config.collect_runtime_config(start_path=tmp_path)
    assert cfg.ncbi_email == "shell@example.org"


def test_missing_keys_reports_unset_variables() -> None:
    cfg = config.RuntimeConfig(None, "tool", None, 70)
    assert list(cfg.missing_keys()) == ["NCBI_EMAIL", "NCBI_API_KEY"]


def test_invalid_line_length(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _isolate_env(monkeypatch)
    monkeypatch.setenv("FASTASEQ_LINE_LENGTH", "wide")
    with pytest.raises(ValueError):
        config.collect_runtime_config(start_path=tmp_path)


def test_defaults() -> None:
    assert config.FORMAT_DEFAULTS.line_length == 70
    assert config.FETCH_DEFAULTS.db == "nuccore"
