from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ad_enricher.models.config_models import DirectoryConfig, EnrichConfig, JobConfig, SmtpConfig

"""Config loader.

Responsibilities:
- Load the YAML config (default config/enrich.yml)
- Merge command line overrides into the `job` section
- Validate the merged document against config/schema.json
- Apply defaults and build the frozen config dataclasses
"""

SCHEMA_PATH = Path(__file__).parent / "schema.json"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or if the
            config data fails schema validation (missing required keys, wrong
            types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"config validation failed at {location}: {e.message}") from e


def merge_overrides(data: dict[str, Any], overrides: dict[str, Any] | None) -> dict[str, Any]:
    """Return a copy of `data` whose `job` section is updated with non-None overrides."""
    merged = dict(data)
    job = dict(merged.get("job") or {})
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        job[key] = value
    merged["job"] = job
    return merged


def load_config(path: Path, overrides: dict[str, Any] | None = None) -> EnrichConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"invalid config: expected a mapping, got {type(data).__name__}")

    data = merge_overrides(data, overrides)
    _validate_config_schema(data)

    job_raw = data["job"]
    dir_raw = data["directory"]
    smtp_raw = data["smtp"]

    job = JobConfig(
        script_name=job_raw["script_name"],
        excel_file=job_raw["excel_file"],
        match=dict(job_raw["match"]),
        ad_properties=tuple(job_raw["ad_properties"]),
        mail_to=tuple(job_raw["mail_to"]),
        log_folder=job_raw.get("log_folder", "./logs"),
        script_admin=tuple(job_raw.get("script_admin", [])),
    )
    directory = DirectoryConfig(
        server=dir_raw["server"],
        base_dn=dir_raw["base_dn"],
        object_class=dir_raw.get("object_class", "user"),
        port=dir_raw.get("port"),
        use_ssl=dir_raw.get("use_ssl", False),
        authentication=dir_raw.get("authentication", "SIMPLE"),
        user=dir_raw.get("user"),
        password=dir_raw.get("password"),
    )
    smtp = SmtpConfig(
        host=smtp_raw["host"],
        from_address=smtp_raw["from_address"],
        port=smtp_raw.get("port", 25),
        use_tls=smtp_raw.get("use_tls", False),
        user=smtp_raw.get("user"),
        password=smtp_raw.get("password"),
    )
    return EnrichConfig(job=job, directory=directory, smtp=smtp)
