"""Tests for gitlog_report.pipeline.config covering CLI parsing and prompting.

Run with coverage to validate configuration handling:
    pytest tests/test_config.py --maxfail=1 -v --cov=gitlog_report.pipeline.config --cov-report=term-missing
"""

from pathlib import Path

import pytest

from gitlog_report.errors import ConfigurationError
from gitlog_report.pipeline import config


@pytest.fixture(autouse=True)
def _no_ambient_token(monkeypatch, tmp_path):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("LOCAL_SECRETS_FILE", str(tmp_path / "missing.json"))


def _never_prompt(message, secret):
    raise AssertionError(f"unexpected prompt: {message}")


def test_resolve_settings_from_cli(tmp_path):
    args = config.parse_args([
        "--csv", "--sqlite",
        "--org-name", "Acme",
        "--token", "t0k",
        "--quiet",
        "--projects-root", str(tmp_path / "projects"),
        "--report-dir", str(tmp_path / "reports"),
        "--clone-url", "https://github.com/{org}/{repo}.git",
    ])
    settings = config.resolve_settings(args, prompter=_never_prompt, interactive=False)
    assert settings.formats == ("csv", "sqlite")
    assert settings.organization == "acme"
    assert settings.brand_name == "Acme"
    assert settings.token == "t0k"
    assert settings.quiet is True and settings.verbose is False
    assert settings.projects_path == tmp_path / "projects" / "acme"
    assert settings.report_dir == tmp_path / "reports"
    assert settings.clone_url_template == "https://github.com/{org}/{repo}.git"


def test_short_flags_match_long_flags():
    args = config.parse_args(["-c", "-o", "acme", "-t", "x", "-v"])
    settings = config.resolve_settings(args, interactive=False)
    assert settings.formats == ("csv",)
    assert settings.verbose is True


def test_defaults_live_under_home_projects():
    settings = config.resolve_settings(config.parse_args(["-s", "-o", "acme", "-t", "x"]), interactive=False)
    assert settings.projects_root == Path("~/Projects").expanduser()
    assert settings.report_dir == Path("~/Projects/git-report").expanduser()
    assert settings.clone_url_template == "git@github.com:{org}/{repo}.git"


def test_token_file_is_read(tmp_path):
    token_file = tmp_path / "git-report.token"
    token_file.write_text("\n  secret-token \n")
    args = config.parse_args(["-c", "-o", "acme", "-f", str(token_file)])
    assert config.resolve_settings(args, interactive=False).token == "secret-token"


def test_unreadable_token_file_is_configuration_error(tmp_path):
    args = config.parse_args(["-c", "-o", "acme", "-f", str(tmp_path / "nope")])
    with pytest.raises(ConfigurationError):
        config.resolve_settings(args, interactive=False)


def test_token_falls_back_to_env_then_secrets(monkeypatch, tmp_path):
    args = config.parse_args(["-c", "-o", "acme"])
    monkeypatch.setenv("GITHUB_TOKEN", "from-env")
    assert config.resolve_settings(args, interactive=False).token == "from-env"

    monkeypatch.delenv("GITHUB_TOKEN")
    secrets = tmp_path / "secrets.json"
    secrets.write_text('{"github_token": "from-secrets"}')
    monkeypatch.setenv("LOCAL_SECRETS_FILE", str(secrets))
    assert config.resolve_settings(args, interactive=False).token == "from-secrets"


@pytest.mark.parametrize(
    "argv, message",
    [
        (["-o", "acme", "-t", "x"], "Report format not specified"),
        (["-c", "-t", "x"], "Organization name not specified"),
        (["-c", "-o", "acme"], "Personal access token not specified"),
    ],
)
def test_missing_inputs_fail_when_not_interactive(argv, message):
    with pytest.raises(ConfigurationError) as excinfo:
        config.resolve_settings(config.parse_args(argv), interactive=False)
    assert excinfo.value.message == message
    assert excinfo.value.exit_code == 1


def test_missing_inputs_are_prompted_for():
    answers = {
        "Select report format(s) [csv, sqlite, both]:": "both",
        "Please enter an organization name:": "AcmeCorp",
    }
    asked = []

    def prompter(message, secret):
        asked.append((message, secret))
        if message.startswith("Please enter a personal access token"):
            return "prompted"
        return answers[message]

    settings = config.resolve_settings(config.parse_args([]), prompter=prompter, interactive=True)
    assert settings.formats == ("csv", "sqlite")
    assert settings.organization == "acmecorp"
    assert settings.token == "prompted"
    assert asked[-1][1] is True  # token prompt is secret


def test_no_prompt_flag_disables_prompting():
    args = config.parse_args(["--no-prompt"])
    with pytest.raises(ConfigurationError):
        config.resolve_settings(args, prompter=_never_prompt)


def test_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as excinfo:
        config.parse_args(["--help"])
    assert excinfo.value.code == 0
    assert "--org-name" in capsys.readouterr().out


def test_unknown_flag_is_configuration_error(capsys):
    with pytest.raises(ConfigurationError) as excinfo:
        config.parse_args(["--bogus"])
    assert excinfo.value.exit_code == 1
    assert "--bogus" in excinfo.value.message
    assert "usage:" in capsys.readouterr().err
