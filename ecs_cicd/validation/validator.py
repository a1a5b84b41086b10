"""Schema checks for .ecs-cicd/config.yaml documents."""

from functools import lru_cache
import json
from pathlib import Path

import jsonschema

DEFAULT_API_VERSION = "ecs-cicd/v1"

# apiVersion -> bundled schema file under ecs_cicd/schema/
SCHEMA_FILES = {
    "ecs-cicd/v1": "deploy-config-v1.json",
}

MAX_REPORTED_ERRORS = 10

SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schema"


@lru_cache(maxsize=None)
def load_schema(api_version: str) -> dict:
    """Return the bundled schema for ``api_version``."""
    try:
        filename = SCHEMA_FILES[api_version]
    except KeyError:
        supported = ", ".join(sorted(SCHEMA_FILES))
        raise jsonschema.ValidationError(
            f"Unsupported apiVersion: {api_version} (supported: {supported})"
        ) from None
    path = SCHEMA_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Schema not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def _location(err: jsonschema.ValidationError) -> str:
    return ".".join(str(p) for p in err.absolute_path) or "(root)"


def validate_config_document(data: dict) -> None:
    """Validate a parsed config document. A missing apiVersion means the current one.

    Raises:
        jsonschema.ValidationError: one message listing every violation by
            location (first ten, then a count). load_deploy_config turns it
            into ConfigError.
    """
    schema = load_schema(data.get("apiVersion", DEFAULT_API_VERSION))
    validator = jsonschema.Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    if not errors:
        return
    lines = ["config validation failed:"]
    lines += [f"  {_location(err)}: {err.message}" for err in errors[:MAX_REPORTED_ERRORS]]
    hidden = len(errors) - MAX_REPORTED_ERRORS
    if hidden > 0:
        lines.append(f"  ... and {hidden} more errors")
    raise jsonschema.ValidationError("\n".join(lines))
