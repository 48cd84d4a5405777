"""
Container Loading

Reads a classifier container from a JSON document and hands the parsed
mapping to ClassifierContainer.from_mapping.
"""
import json
from pathlib import Path
from typing import Union

from sexest.core.container import ClassifierContainer
from sexest.core.errors import ConfigError
from sexest.utils import get_logger

logger = get_logger(__name__)


def load_container(path: Union[str, Path]) -> ClassifierContainer:
    """Load and validate a classifier container JSON file."""
    path = Path(path)
    logger.info(f"Loading classifier container from {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path} is not a valid classifier container: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} is not a valid classifier container: top level must be an object")
    data.setdefault("name", path.stem)
    return ClassifierContainer.from_mapping(data)
