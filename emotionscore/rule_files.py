##########################################################################
#                                                                        #
#  This file (rule_files.py) reads the YAML or JSON files that extend    #
#  the built-in rule tables.                                             #
#                                                                        #
##########################################################################

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import yaml


def read_rule_file(path: str | Path, table_logger: logging.Logger, label: str) -> Mapping[str, Any] | None:
    """Return the top-level mapping of a rule file, or None when there is nothing to apply.

    Files ending in ``.json`` are parsed as JSON, anything else with
    ``yaml.safe_load``. Warnings go to the logger of the table being loaded."""
    rules_path = Path(path)
    if not rules_path.exists():
        table_logger.warning(f"{label} file not found, using built-in tables: {rules_path}")
        return None

    raw_text = rules_path.read_text(encoding="utf-8")
    if rules_path.suffix.lower() == ".json":
        payload = json.loads(raw_text)
    else:
        payload = yaml.safe_load(raw_text)
    if not isinstance(payload, Mapping):
        table_logger.warning(f"{label} file has no mapping at the top level: {rules_path}")
        return None
    return payload


__all__ = ["read_rule_file"]
