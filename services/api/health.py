"""API health and readiness helpers."""
from __future__ import annotations

import yaml
from pydantic import ValidationError

from greenload.utils.config import CONFIG_MODELS, config_dir, validate_config


def readiness_check() -> dict:
    directory = config_dir()
    checks = {"config_dir": str(directory)}
    ok = True
    for name in CONFIG_MODELS:
        path = directory / name
        if not path.exists():
            # engines fall back to built-in defaults
            checks[name] = "default"
            continue
        try:
            validate_config(path)
            checks[name] = "ok"
        except ValidationError as exc:
            checks[name] = f"invalid: {exc.error_count()} error(s)"
            ok = False
        except yaml.YAMLError:
            checks[name] = "invalid: unreadable YAML"
            ok = False
    status = "ok" if ok else "degraded"
    return {"status": status, "checks": checks}
