import json

from crashreport.config import SECTION_LIMIT, get_default_config, is_configured, load_settings


def test_defaults_when_file_missing(tmp_path):
    settings = load_settings(str(tmp_path / "missing.json"), environ={})
    assert settings.github_token is None
    assert settings.section_limit == SECTION_LIMIT
    assert settings.body_limit == 65536
    assert settings.helper_paths == ["/usr/bin/pkexec", "/bin/pkexec"]


def test_file_then_environment(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"github_token": "from-file", "repo_name": "reports", "command_timeout": 5}))
    settings = load_settings(str(path), environ={"CRASHREPORT_GITHUB_TOKEN": "from-env"})
    assert settings.github_token == "from-env"
    assert settings.repo_name == "reports"
    assert settings.command_timeout == 5


def test_invalid_file_is_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert load_settings(str(path), environ={}).repo_owner == get_default_config()["repo_owner"]


def test_invalid_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"section_limit": "lots"}))
    assert load_settings(str(path), environ={}).section_limit == SECTION_LIMIT


def test_default_config_has_no_tokens():
    config = get_default_config()
    assert config["github_token"] is None
    assert config["gemini_api_key"] is None


def test_is_configured():
    assert is_configured("ghp_real")
    assert not is_configured(None)
    assert not is_configured("")
    assert not is_configured("your_github_token_here")
