"""File I/O helpers for snapshot bundles and engine results."""

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('fpl_live.utils')


def load_json(
    path: Path | str,
    schema: type[T] | None = None,
) -> Any | T:
    """
    Load a JSON file, optionally validating it against a schema.

    Args:
        path: Path to JSON file
        schema: Optional Pydantic model to validate against

    Returns:
        Parsed JSON, or a schema instance if one was given

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON is malformed
        ValueError: If schema validation fails

    Example:
        from fpl_live.schemas import SnapshotBundle
        bundle = load_json('snapshots/gw22.json', schema=SnapshotBundle)
    """
    path = Path(path)
    logger.debug(f'Loading JSON from: {path}')

    if not path.exists():
        logger.error(f'File not found: {path}')
        raise FileNotFoundError(f'File not found: {path}')

    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f'Invalid JSON in {path}: {e.msg} at position {e.pos}')
        raise json.JSONDecodeError(f'Invalid JSON in {path}: {e.msg}', e.doc, e.pos) from e

    if schema is None:
        return data

    try:
        validated = schema.model_validate(data)
    except ValidationError as e:
        logger.error(f'Schema validation failed for {path}: {e}')
        raise ValueError(f'Schema validation failed for {path}:\n{e}') from e
    logger.debug(f'Schema validation passed for: {path}')
    return validated


def save_json(
    path: Path | str,
    data: Any,
    indent: int = 2,
    create_dirs: bool = True,
) -> None:
    """
    Write data as JSON.

    Pydantic models are dumped with model_dump(); objects exposing
    to_dict() (engine results) are converted first.

    Args:
        path: Path to write to
        data: JSON-serializable data, Pydantic model, or object with to_dict()
        indent: Indentation level (default: 2 spaces)
        create_dirs: Create parent directories if missing (default: True)

    Raises:
        TypeError: If data is not JSON-serializable
        OSError: If file cannot be written
    """
    path = Path(path)
    logger.debug(f'Saving JSON to: {path}')

    if create_dirs:
        path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(data, BaseModel):
        json_data = data.model_dump(mode='json')
    elif hasattr(data, 'to_dict'):
        json_data = data.to_dict()
    else:
        json_data = data

    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(json_data, f, indent=indent, ensure_ascii=False)
    except TypeError as e:
        logger.error(f'Data is not JSON-serializable: {e}')
        raise TypeError(f'Data is not JSON-serializable: {e}') from e


def validate_json_file(
    path: Path | str,
    schema: type[T],
) -> tuple[bool, str | None]:
    """
    Check a JSON file against a schema.

    Args:
        path: Path to JSON file
        schema: Pydantic model to validate against

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        load_json(path, schema=schema)
        return True, None
    except FileNotFoundError:
        return False, f'File not found: {path}'
    except json.JSONDecodeError as e:
        return False, f'Invalid JSON: {e.msg} at position {e.pos}'
    except ValueError as e:
        return False, str(e)
