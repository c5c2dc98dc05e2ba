"""
App list configuration.

Reads the set of apps to poll from a JSON file of the form:

    {"apps": ["389801252", {"id": "447188370", "name": "Snapchat"}]}
"""

import json
import logging
import os
from typing import Dict, FrozenSet, List

logger = logging.getLogger(__name__)


def load_app_ids(config_path: str) -> FrozenSet[str]:
    """
    Load the app ids to poll.

    Args:
        config_path: Path to the apps JSON file

    Returns:
        Set of app ids (duplicates collapse)

    Raises:
        ValueError: If the file is missing or malformed
    """
    app_ids = frozenset(app_id for app_id, _ in _load_entries(config_path))
    logger.info(f"Loaded {len(app_ids)} app ids from {config_path}")
    return app_ids


def load_app_names(config_path: str) -> Dict[str, str]:
    """
    Load display names for configured apps.

    Apps configured as bare ids are named after their id.
    """
    return {app_id: name for app_id, name in _load_entries(config_path)}


def _load_entries(config_path: str) -> List[tuple]:
    if not os.path.exists(config_path):
        raise ValueError(f"Apps config not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Apps config {config_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("apps"), list):
        raise ValueError(f"Apps config {config_path} must contain an 'apps' list")

    entries = []
    for item in data["apps"]:
        if isinstance(item, (str, int)):
            entries.append((str(item), str(item)))
        elif isinstance(item, dict) and "id" in item:
            app_id = str(item["id"])
            entries.append((app_id, item.get("name") or app_id))
        else:
            raise ValueError(f"Invalid app entry in {config_path}: {item!r}")

    return entries
