"""
Loading the raw record feed from JSON files.

The feed is a JSON object mapping id to record. Several candidate paths can
be tried in order; the first that loads and builds wins.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from starnav.system.builder import HierarchyBuilder
from starnav.system.errors import MalformedInputError, StarSystemError
from starnav.system.types import StarSystem
from starnav.system.validator import SystemValidator, ValidationReport
from starnav.utils.config_loader import HierarchyConfig
from starnav.utils.logging_config import get_logger

logger = get_logger("hierarchy.loader")


def parse_records(data: Any) -> Dict[str, Any]:
    """
    Check that parsed JSON is a mapping of id to record.

    Raises:
        MalformedInputError: If the top level is not an object
    """
    if not isinstance(data, Mapping):
        raise MalformedInputError(
            f"Invalid system data: expected an object, got {type(data).__name__}"
        )

    invalid = [key for key, value in data.items() if not isinstance(value, Mapping)]
    if invalid:
        logger.warning(f"Found invalid celestial objects: {', '.join(map(str, invalid))}")
    return dict(data)


def load_records(path: Path) -> Dict[str, Any]:
    """
    Read a JSON feed file.

    Raises:
        FileNotFoundError: If the file does not exist
        MalformedInputError: If the file is not valid JSON or not an object
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        preview = text[:100].replace("\n", " ")
        raise MalformedInputError(f"Invalid JSON in {path}: {exc} (starts with {preview!r})") from exc

    return parse_records(data)


def load_system(
    path: Path,
    config: Optional[HierarchyConfig] = None,
) -> Tuple[StarSystem, ValidationReport]:
    """Load, build and validate a system from one file."""
    config = config or HierarchyConfig()
    logger.info(f"Loading system data from: {path}")
    system = HierarchyBuilder(config).build(load_records(path))

    validator = SystemValidator(system, system_prefix=config.system_prefix)
    report = validator.validate()
    if report.valid:
        logger.info("Star system data loaded and validated successfully")
    else:
        for issue in report.issues:
            logger.warning(issue)
    logger.info(f"Star system statistics: {validator.generate_statistics()}")
    return system, report


def load_first_available(
    paths: Sequence[Path],
    config: Optional[HierarchyConfig] = None,
) -> Tuple[StarSystem, ValidationReport, Path]:
    """
    Try each candidate path in order.

    Returns:
        (system, validation report, path that loaded)

    Raises:
        The last error encountered if every path fails
    """
    if not paths:
        raise FileNotFoundError("No candidate data paths given")

    last_error: Optional[Exception] = None
    for path in paths:
        try:
            system, report = load_system(Path(path), config)
            return system, report, Path(path)
        except (OSError, StarSystemError) as exc:
            logger.warning(f"Failed to load from {path}: {exc}")
            last_error = exc

    logger.error("Failed to initialize star system data from all paths")
    raise last_error
