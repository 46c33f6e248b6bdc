"""
Error registry management for loading and accessing error definitions.

This module loads the error_registry.yaml file shipped with the backend
package (or the file named by ``ERROR_REGISTRY_PATH``) and provides
utilities to access error definitions by code.
"""

from pathlib import Path
from typing import Dict, Optional

import yaml

from synergy_types.errors import ErrorDefinition, ErrorMessageFormat
from synergy_backend.settings import settings


# Cache for error registry
_error_registry: Optional[Dict[str, ErrorDefinition]] = None


def get_registry_path() -> Path:
    if settings.ERROR_REGISTRY_PATH:
        return Path(settings.ERROR_REGISTRY_PATH)
    return Path(__file__).parent.parent / "error_registry.yaml"


def _read_registry_file() -> dict:
    registry_path = get_registry_path()

    if not registry_path.exists():
        raise FileNotFoundError(
            f"Error registry not found at {registry_path}. "
            "Set ERROR_REGISTRY_PATH or reinstall the package."
        )

    with open(registry_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data or "errors" not in data:
        raise ValueError("Invalid error registry format: missing 'errors' key")

    return data


def load_error_registry() -> Dict[str, ErrorDefinition]:
    """
    Load error registry from YAML file.

    Returns:
        Dictionary mapping error codes to ErrorDefinition objects

    Raises:
        FileNotFoundError: If the registry file is not found
        ValueError: If YAML is malformed or validation fails
    """
    global _error_registry

    if _error_registry is not None:
        return _error_registry

    data = _read_registry_file()

    registry = {}
    for error_dict in data["errors"]:
        try:
            message_data = error_dict.get("message", {})
            error_def = ErrorDefinition(
                code=error_dict["code"],
                http_status=error_dict["http_status"],
                category=error_dict["category"],
                severity=error_dict["severity"],
                title=error_dict["title"],
                message=ErrorMessageFormat(
                    plain=message_data.get("plain", ""),
                    markdown=message_data.get("markdown"),
                ),
                retry_after=error_dict.get("retry_after"),
                internal_description=error_dict.get("internal_description", ""),
                common_causes=error_dict.get("common_causes", []),
            )
        except (KeyError, ValueError) as e:
            raise ValueError(
                f"Failed to parse error definition for {error_dict.get('code', 'unknown')}: {e}"
            ) from e

        if error_def.code in registry:
            raise ValueError(f"Duplicate error code in registry: {error_def.code}")
        registry[error_def.code] = error_def

    _error_registry = registry
    return _error_registry


def get_error_definition(error_code: str) -> ErrorDefinition:
    """
    Get error definition by code.

    Unknown codes resolve to a generic internal error definition instead of
    raising, so a typo never turns an error response into a crash.
    """
    registry = load_error_registry()

    if error_code not in registry:
        return ErrorDefinition(
            code="UNKNOWN",
            http_status=500,
            category="internal",
            severity="error",
            title="Unknown Error",
            message=ErrorMessageFormat(
                plain=f"An error occurred (code: {error_code})",
                markdown=f"**Unknown Error**\n\nAn error occurred with code: `{error_code}`",
            ),
            internal_description=f"Unknown error code: {error_code}",
        )

    return registry[error_code]


def get_all_error_codes() -> list[str]:
    return list(load_error_registry().keys())


def get_errors_by_http_status(http_status: int) -> list[ErrorDefinition]:
    return [
        error_def
        for error_def in load_error_registry().values()
        if error_def.http_status == http_status
    ]


def get_registry_version() -> str:
    return str(_read_registry_file().get("version", "unknown"))


def validate_error_registry() -> tuple[bool, list[str]]:
    """
    Validate error registry for completeness and consistency.

    Returns:
        Tuple of (is_valid, list of validation errors)
    """
    errors = []

    try:
        registry = load_error_registry()
    except (OSError, ValueError) as e:
        return False, [f"Failed to load registry: {e}"]

    for code, error_def in registry.items():
        if not error_def.message.plain:
            errors.append(f"{code}: Missing plain text message")

        if error_def.http_status < 100 or error_def.http_status > 599:
            errors.append(f"{code}: Invalid HTTP status code {error_def.http_status}")

        if not error_def.internal_description:
            errors.append(f"{code}: Missing internal description")

    return len(errors) == 0, errors
