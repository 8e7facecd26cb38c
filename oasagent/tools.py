"""Built-in tools exposed to the agent."""

from __future__ import annotations

from typing import Any, Callable, Dict, List

import yaml

from .log import get_logger

logger = get_logger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def _check_info(info: Any, errors: List[str]) -> None:
    if not isinstance(info, dict):
        errors.append("Missing required 'info' object")
        return
    for key in ("title", "version"):
        if info.get(key) in (None, ""):
            errors.append(f"Missing required field 'info.{key}'")


def _check_paths(paths: Any, errors: List[str]) -> int:
    if paths is None:
        errors.append("Missing required 'paths' object")
        return 0
    if not isinstance(paths, dict):
        errors.append("'paths' must be a mapping of path templates to path items")
        return 0

    for path, item in paths.items():
        if not str(path).startswith("/"):
            errors.append(f"Path '{path}' must start with '/'")
        if not isinstance(item, dict):
            errors.append(f"Path item for '{path}' must be a mapping")
            continue
        for method, operation in item.items():
            if method not in HTTP_METHODS:
                continue
            if not isinstance(operation, dict):
                errors.append(f"Operation {method.upper()} {path} must be a mapping")
                continue
            responses = operation.get("responses")
            if not isinstance(responses, dict) or not responses:
                errors.append(f"Operation {method.upper()} {path} has no responses")
    return len(paths)


def validate_openapi(document: str) -> Dict[str, Any]:
    """Check an OpenAPI YAML document for structural errors."""
    try:
        spec = yaml.safe_load(document)
    except yaml.YAMLError as exc:
        return {"status": "error", "errors": [f"Invalid YAML: {exc}"]}

    if not isinstance(spec, dict):
        return {"status": "error", "errors": ["Document root must be a mapping"]}

    errors: List[str] = []
    version = spec.get("openapi")
    if version is None:
        errors.append("Missing required field 'openapi'")
    elif not str(version).startswith("3."):
        errors.append(f"Unsupported OpenAPI version '{version}' (expected 3.x)")

    _check_info(spec.get("info"), errors)
    path_count = _check_paths(spec.get("paths"), errors)

    if errors:
        logger.debug("validate_openapi found %d problem(s)", len(errors))
        return {"status": "error", "errors": errors}
    return {"status": "ok", "version": str(version), "paths": path_count}


def build_tool_map() -> Dict[str, Callable[..., Any]]:
    """Return the name -> handler map matching ``prompts.TOOLS``."""
    return {"validate_openapi": validate_openapi}
