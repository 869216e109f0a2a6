"""Scenario file loading for GD Analyzer.

A scenario is a read-only JSON snapshot of the four input groups:

    {
        "name": "Usina Solar Uberlândia",
        "capex_mode": "per_wp",
        "system": {...},
        "costs": {...},
        "tariffs": {...},
        "financial": {...}
    }

Missing groups or fields fall back to the dataclass defaults.
"""

import json
import logging
from pathlib import Path

from gd_analyzer.models.project import Project

logger = logging.getLogger(__name__)


def load_scenario(filepath: str) -> Project:
    """Load a project's inputs from a JSON scenario file.

    Args:
        filepath: Path to the JSON scenario file.

    Returns:
        Project with inputs populated and no results.

    Raises:
        FileNotFoundError: If file does not exist.
        json.JSONDecodeError: If file is not valid JSON.
        ValueError: If capex_mode or adjustment_type is not recognized.
    """
    path = Path(filepath)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    project = Project.from_dict(data)
    logger.info("Loaded scenario '%s' from %s", project.name, path)
    return project
