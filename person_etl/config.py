"""
Pipeline configuration.

Settings are resolved from, lowest to highest precedence: model defaults,
a YAML file, environment variables (a ``.env`` file is loaded first if
present), and explicit overrides such as command-line flags.

Expected YAML format:
```yaml
input_path: data/people-1000.csv
chunk_size: 10
tokenizer:
  delimiter: ","
  strict: false
  names: [userId, firstName, lastName, gender, email, phone, dateOfBirth, jobTitle]
lines_to_skip: 1
database:
  host: localhost
  port: 5432
  name: people
  user: pipeline
  table: person
```
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator

from person_etl.core.models import PERSON_FIELD_NAMES

DEFAULT_CONFIG_PATH = "config/pipeline.yaml"

# Environment variable -> dotted settings path
ENV_OVERRIDES: dict[str, str] = {
    "PERSON_ETL_INPUT_PATH": "input_path",
    "PERSON_ETL_CHUNK_SIZE": "chunk_size",
    "PERSON_ETL_LINES_TO_SKIP": "lines_to_skip",
    "PERSON_ETL_ENCODING": "encoding",
    "PERSON_ETL_DELIMITER": "tokenizer.delimiter",
    "PERSON_ETL_STRICT": "tokenizer.strict",
    "PERSON_ETL_CREATE_TABLE": "create_table",
    "DB_HOST": "database.host",
    "DB_PORT": "database.port",
    "DB_NAME": "database.name",
    "DB_USER": "database.user",
    "DB_PASSWORD": "database.password",
    "DB_TABLE": "database.table",
}


class TokenizerSettings(BaseModel):
    """Line tokenizer settings."""

    delimiter: str = ","
    strict: bool = False
    quote_character: str = '"'
    names: list[str] = Field(default_factory=lambda: list(PERSON_FIELD_NAMES))

    @field_validator("delimiter", "quote_character")
    @classmethod
    def check_single_character(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError(f"must be a single character, got {v!r}")
        return v

    @field_validator("names")
    @classmethod
    def check_names(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("at least one field name is required")
        if len(set(v)) != len(v):
            raise ValueError(f"field names must be unique: {v}")
        return v


class DatabaseSettings(BaseModel):
    """PostgreSQL connection and target table settings."""

    host: str = "localhost"
    port: int = Field(5432, ge=1, le=65535)
    name: str = "people"
    user: str = "pipeline"
    password: SecretStr | None = None
    table: str = Field("person", min_length=1)
    min_pool_size: int = Field(1, ge=1)
    max_pool_size: int = Field(4, ge=1)
    timeout: float = Field(30.0, gt=0)


class PipelineSettings(BaseModel):
    """
    Settings for one import run.

    Attributes:
        job_name: Name reported in results and logs
        input_path: Delimited input file
        chunk_size: Records per chunk (one transaction per chunk)
        lines_to_skip: Leading lines to skip (the header)
        encoding: Input file encoding
        create_table: Create the target table before the first chunk
        tokenizer: Line tokenizer settings
        database: Database settings
    """

    job_name: str = "importPersons"
    input_path: str = "data/people-1000.csv"
    chunk_size: int = Field(10, ge=1)
    lines_to_skip: int = Field(1, ge=0)
    encoding: str = "utf-8"
    create_table: bool = True
    tokenizer: TokenizerSettings = Field(default_factory=TokenizerSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


def _set_path(data: dict[str, Any], dotted: str, value: Any) -> None:
    keys = dotted.split(".")
    target = data
    for key in keys[:-1]:
        target = target.setdefault(key, {})
    target[keys[-1]] = value


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_yaml_config(config_path: str | Path) -> dict[str, Any]:
    """
    Load a YAML settings file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a YAML mapping
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path) as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_path}")
    return config


def env_overrides(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Collect settings overrides from environment variables."""
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for env_name, dotted in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is not None and value != "":
            _set_path(overrides, dotted, value)
    return overrides


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> PipelineSettings:
    """
    Resolve pipeline settings.

    Args:
        config_path: YAML file (defaults to PERSON_ETL_CONFIG, then
            config/pipeline.yaml when it exists)
        overrides: Highest-precedence values, as a nested dict or with dotted keys
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated PipelineSettings

    Raises:
        FileNotFoundError: If an explicitly named config file is missing
        pydantic.ValidationError: If the resolved settings are invalid
    """
    if environ is None:
        load_dotenv(override=False)
        environ = dict(os.environ)

    data: dict[str, Any] = {}

    explicit_path = config_path or environ.get("PERSON_ETL_CONFIG")
    if explicit_path:
        data = load_yaml_config(explicit_path)
    elif Path(DEFAULT_CONFIG_PATH).exists():
        data = load_yaml_config(DEFAULT_CONFIG_PATH)

    data = _merge(data, env_overrides(environ))

    if overrides:
        nested: dict[str, Any] = {}
        for key, value in overrides.items():
            if value is not None:
                _set_path(nested, key, value)
        data = _merge(data, nested)

    return PipelineSettings.model_validate(data)
