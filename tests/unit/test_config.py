import json
from pathlib import Path

import pytest

from api_gen.config import Settings, load_input_data
from api_gen.errors import ConfigurationError


def test_defaults():
    settings = Settings.from_environment(environ={})

    assert settings.input_path == Path("config/api.yaml")
    assert settings.base_dir is None
    assert settings.log_level == "INFO"
    assert settings.verify_tables is False


def test_environment_values():
    settings = Settings.from_environment(
        environ={
            "API_GEN_INPUT": "other.json",
            "API_GEN_BASE_DIR": "/srv/api",
            "CDK_DEFAULT_REGION": "eu-west-1",
            "CDK_DEFAULT_ACCOUNT": "123456789012",
            "API_GEN_LOG_LEVEL": "debug",
            "API_GEN_VERIFY_TABLES": "true",
        }
    )

    assert settings.input_path == Path("other.json")
    assert settings.base_dir == Path("/srv/api")
    assert settings.region == "eu-west-1"
    assert settings.account == "123456789012"
    assert settings.log_level == "DEBUG"
    assert settings.verify_tables is True


def test_context_overrides_environment():
    context = {"inputData": "from-context.yaml", "verifyTables": "false"}
    settings = Settings.from_environment(
        environ={"API_GEN_INPUT": "from-env.yaml", "API_GEN_VERIFY_TABLES": "true"},
        try_get_context=context.get,
    )

    assert settings.input_path == Path("from-context.yaml")
    assert settings.verify_tables is False


def test_load_yaml(tmp_path):
    path = tmp_path / "api.yaml"
    path.write_text("users:\n  UsersApi:\n    stage: dev\n")

    assert load_input_data(path) == {"users": {"UsersApi": {"stage": "dev"}}}


def test_load_json(tmp_path, input_data):
    path = tmp_path / "api.json"
    path.write_text(json.dumps(input_data))

    assert load_input_data(path) == input_data


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_input_data(tmp_path / "missing.yaml")


def test_load_non_mapping(tmp_path):
    path = tmp_path / "api.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ConfigurationError):
        load_input_data(path)
