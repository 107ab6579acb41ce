"""Settings for the api-gen CDK app."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml

from api_gen.errors import ConfigurationError

DEFAULTS = {
    "input_path": "config/api.yaml",
    "log_level": "INFO",
    "verify_tables": False,
}


def _as_bool(value) -> bool:
    # cdk -c flags arrive as strings
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    input_path: Path = Path(DEFAULTS["input_path"])
    base_dir: Optional[Path] = None
    region: Optional[str] = None
    account: Optional[str] = None
    log_level: str = DEFAULTS["log_level"]
    verify_tables: bool = DEFAULTS["verify_tables"]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        base_dir = data.get("base_dir")
        return cls(
            input_path=Path(data.get("input_path") or DEFAULTS["input_path"]),
            base_dir=Path(base_dir) if base_dir else None,
            region=data.get("region"),
            account=data.get("account"),
            log_level=str(data.get("log_level") or DEFAULTS["log_level"]).upper(),
            verify_tables=_as_bool(data.get("verify_tables", DEFAULTS["verify_tables"])),
        )

    @classmethod
    def from_environment(cls, environ=None, try_get_context: Optional[Callable] = None) -> "Settings":
        """CDK context wins over environment variables."""
        environ = os.environ if environ is None else environ
        context = try_get_context or (lambda key: None)

        def pick(context_key, env_key):
            value = context(context_key)
            return value if value is not None else environ.get(env_key)

        return cls.from_mapping(
            {
                "input_path": pick("inputData", "API_GEN_INPUT"),
                "base_dir": pick("baseDir", "API_GEN_BASE_DIR"),
                "region": environ.get("CDK_DEFAULT_REGION"),
                "account": environ.get("CDK_DEFAULT_ACCOUNT"),
                "log_level": environ.get("API_GEN_LOG_LEVEL"),
                "verify_tables": pick("verifyTables", "API_GEN_VERIFY_TABLES") or False,
            }
        )


def load_input_data(path) -> Mapping[str, Any]:
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"input file {path} does not exist")

    with path.open("r", encoding="utf-8") as handle:
        if path.suffix == ".json":
            data = json.load(handle)
        else:
            data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        raise ConfigurationError("input file must contain a mapping of gateway groups")
    return data


__all__ = ["Settings", "load_input_data"]
