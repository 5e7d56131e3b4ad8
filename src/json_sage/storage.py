"""
Read and write JSON documents and schema files.

All files are UTF-8. Failures surface as JsonSageError so the CLI can
report them uniformly.
"""

import json
from pathlib import Path
from typing import Any

import structlog

from json_sage.exceptions import ErrorKind, JsonSageError

logger = structlog.get_logger(__name__)


def load_json(path: str | Path) -> Any:
    """
    Read and parse a JSON file.

    Raises:
        JsonSageError: IO when the file cannot be read, VALIDATION when it
            is not UTF-8 or not valid JSON
    """
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise JsonSageError(
            f"Cannot read {file_path}: {e.strerror or e}",
            kind=ErrorKind.IO,
            details={"path": str(file_path)},
        ) from e
    except UnicodeDecodeError as e:
        raise JsonSageError(
            f"{file_path} is not valid UTF-8 text",
            kind=ErrorKind.VALIDATION,
            details={"path": str(file_path), "position": e.start},
        ) from e

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise JsonSageError(
            f"Invalid JSON in {file_path}: {e.msg}",
            kind=ErrorKind.VALIDATION,
            details={"path": str(file_path), "parse_error": f"{e.msg} at line {e.lineno} col {e.colno}"},
        ) from e


def load_schema(path: str | Path) -> dict[str, Any]:
    """Load a schema file; the top level must be a JSON object."""
    try:
        schema = load_json(path)
    except JsonSageError as e:
        raise JsonSageError(f"Failed to load schema: {e.message}", kind=e.kind, details=e.details) from e

    if not isinstance(schema, dict):
        raise JsonSageError(
            f"Failed to load schema: expected a JSON object, got {type(schema).__name__}",
            kind=ErrorKind.VALIDATION,
            details={"path": str(path)},
        )
    return schema


def dump_json(data: Any, pretty: bool = True) -> str:
    """Serialize with 2-space indentation, or compactly."""
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def save_schema(schema: dict[str, Any], path: str | Path, pretty: bool = True) -> Path:
    """
    Write ``schema`` to ``path``, creating parent directories.

    Returns:
        Absolute path written

    Raises:
        JsonSageError: IO when the file cannot be written
    """
    file_path = Path(path).resolve()
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(dump_json(schema, pretty=pretty), encoding="utf-8")
    except OSError as e:
        raise JsonSageError(
            f"Failed to save schema: {e.strerror or e}",
            kind=ErrorKind.IO,
            details={"path": str(file_path)},
        ) from e

    logger.debug("Schema saved", path=str(file_path), pretty=pretty)
    return file_path
