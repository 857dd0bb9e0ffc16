"""Tests for settings loading and the CLI."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

import cli
from config import get_settings, get_settings_for_testing

from conftest import TEST_SECRET


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Run from an empty directory (no .env) with no TASKTRACK_ variables."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("TASKTRACK_"):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


# =============================================================================
# Settings
# =============================================================================


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_secret_is_required(self, clean_env) -> None:
        with pytest.raises(ValidationError):
            get_settings_for_testing()

    def test_short_secret_rejected(self, clean_env) -> None:
        with pytest.raises(ValidationError):
            get_settings_for_testing(jwt_secret_key="short")

    def test_defaults(self, clean_env) -> None:
        settings = get_settings_for_testing(jwt_secret_key=TEST_SECRET)

        assert settings.jwt_algorithm == "HS256"
        assert settings.jwt_access_token_expire_minutes == 60
        assert settings.bcrypt_rounds == 12
        assert settings.storage_backend == "redis"

    def test_reads_prefixed_environment(self, clean_env) -> None:
        clean_env.setenv("TASKTRACK_JWT_SECRET_KEY", TEST_SECRET)
        clean_env.setenv("TASKTRACK_STORAGE_BACKEND", "memory")
        clean_env.setenv("TASKTRACK_JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "5")

        settings = get_settings()

        assert settings.jwt_secret_key == TEST_SECRET
        assert settings.storage_backend == "memory"
        assert settings.jwt_access_token_expire_minutes == 5

    def test_reads_dotenv_file(self, clean_env, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text(f"TASKTRACK_JWT_SECRET_KEY={TEST_SECRET}\n")

        assert get_settings().jwt_secret_key == TEST_SECRET

    def test_unknown_backend_rejected(self, clean_env) -> None:
        with pytest.raises(ValidationError):
            get_settings_for_testing(jwt_secret_key=TEST_SECRET, storage_backend="sqlite")

    @pytest.mark.parametrize("rounds", [3, 32])
    def test_bcrypt_rounds_bounds(self, clean_env, rounds: int) -> None:
        with pytest.raises(ValidationError):
            get_settings_for_testing(jwt_secret_key=TEST_SECRET, bcrypt_rounds=rounds)


# =============================================================================
# CLI
# =============================================================================


class TestCli:
    """Tests for the tasktrack command."""

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 2

    def test_create_user(self, clean_env, capsys) -> None:
        clean_env.setenv("TASKTRACK_JWT_SECRET_KEY", TEST_SECRET)
        clean_env.setenv("TASKTRACK_STORAGE_BACKEND", "memory")
        clean_env.setenv("TASKTRACK_BCRYPT_ROUNDS", "4")

        exit_code = cli.main(["create-user", "alice", "--password", "pw1"])

        assert exit_code == 0
        assert "Created user 'alice'" in capsys.readouterr().out

    def test_missing_configuration(self, clean_env, capsys) -> None:
        exit_code = cli.main(["create-user", "alice", "--password", "pw1"])

        assert exit_code == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_serve_passes_factory_to_uvicorn(self, clean_env, monkeypatch: pytest.MonkeyPatch) -> None:
        clean_env.setenv("TASKTRACK_JWT_SECRET_KEY", TEST_SECRET)
        calls = []
        monkeypatch.setattr("uvicorn.run", lambda *args, **kwargs: calls.append((args, kwargs)))

        exit_code = cli.main(["serve", "--port", "9000"])

        assert exit_code == 0
        (args, kwargs), = calls
        assert args == ("api.main:create_app",)
        assert kwargs["factory"] is True
        assert kwargs["port"] == 9000
        assert kwargs["host"] == "127.0.0.1"
