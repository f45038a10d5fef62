"""Tests for settings, logging setup and the command-line entry point."""

import logging

import pytest
from conftest import requires_git, run_git
from pydantic import ValidationError

from repoloader.__main__ import build_parser, main
from repoloader.config import Settings, get_settings
from repoloader.log_config import configure_logging


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        for name in ("DEFAULT_BRANCH", "REMOTE_NAME", "LOG_LEVEL", "GIT_EXECUTABLE"):
            monkeypatch.delenv(f"REPOLOADER_{name}", raising=False)

        settings = Settings(_env_file=None)

        assert settings.git_executable == "git"
        assert settings.default_branch == "master"
        assert settings.remote_name == "origin"
        assert settings.command_timeout == 60.0
        assert settings.logs_enabled is True
        assert settings.remote_default_branch == "origin/master"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("REPOLOADER_DEFAULT_BRANCH", "main")
        monkeypatch.setenv("REPOLOADER_REMOTE_NAME", "upstream")
        monkeypatch.setenv("REPOLOADER_LOGS_ENABLED", "false")

        settings = Settings(_env_file=None)

        assert settings.default_branch == "main"
        assert settings.remote_default_branch == "upstream/main"
        assert settings.logs_enabled is False

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, command_timeout=0)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_level_from_settings(self):
        configure_logging(Settings(_env_file=None, log_level="debug"))
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(Settings(_env_file=None, log_level="chatty"))
        assert logging.getLogger().level == logging.INFO

    def test_disabled_logs(self):
        configure_logging(Settings(_env_file=None, logs_enabled=False, json_logs=True))
        assert logging.getLogger().level > logging.CRITICAL


class TestCommandLine:
    """Tests for the repoloader command."""

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        assert args.path == "."
        assert args.show_all is False
        assert args.log_level is None

    def test_parser_options(self):
        args = build_parser().parse_args(["repo", "--all", "--log-level", "DEBUG"])
        assert (args.path, args.show_all, args.log_level) == ("repo", True, "DEBUG")

    @requires_git
    def test_summary(self, temp_git_repo, capsys):
        (temp_git_repo / "scratch.txt").write_text("draft\n")
        run_git(temp_git_repo, "tag", "v0.1")

        assert main([str(temp_git_repo), "--log-level", "WARNING"]) == 0

        out = capsys.readouterr().out
        assert f"Repository: {temp_git_repo.resolve()}" in out
        assert "Commits:    2" in out
        head = run_git(temp_git_repo, "rev-parse", "HEAD")
        assert f"Head:       {head[:8]} Add main module" in out
        assert "Tags:       1" in out
        assert "Pending:    1 untracked" in out

    @requires_git
    def test_not_a_repository(self, tmp_path, capsys):
        assert main([str(tmp_path), "--log-level", "CRITICAL"]) == 1
        assert "Load failed" in capsys.readouterr().err
