"""Group model loading from a JSON definition file.

File layout::

    {
      "groups": [
        {"name": "all-css", "resources": ["css/a.css", {"uri": "js/b.js", "type": "js"}]}
      ]
    }

A resource given as a bare string has its type inferred from its extension.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from deltaforge.core.errors import GroupModelError
from deltaforge.models.resources import Group, GroupModel, Resource

logger = logging.getLogger(__name__)


def _coerce_resource(raw: Any) -> Resource:
    if isinstance(raw, str):
        return Resource.create(raw)
    if isinstance(raw, dict) and "type" not in raw and isinstance(raw.get("uri"), str):
        return Resource.create(raw["uri"])
    return Resource.model_validate(raw)


def parse_group_model(data: Any) -> GroupModel:
    """Build a ``GroupModel`` from already-decoded JSON data."""
    if not isinstance(data, dict) or not isinstance(data.get("groups"), list):
        raise GroupModelError("Group model must be an object with a 'groups' list")
    try:
        groups = [
            Group(
                name=raw["name"],
                resources=[_coerce_resource(r) for r in raw.get("resources", [])],
            )
            for raw in data["groups"]
        ]
        return GroupModel(groups=groups)
    except (KeyError, TypeError) as exc:
        raise GroupModelError(f"Malformed group definition: {exc!r}") from exc
    except ValidationError as exc:
        raise GroupModelError(f"Invalid group model: {exc}") from exc


def load_group_model(path: Path) -> GroupModel:
    """Read and validate the group model stored at *path*."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise GroupModelError(f"Group model not found: {path}") from exc
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise GroupModelError(f"Cannot read group model {path}: {exc}") from exc
    model = parse_group_model(data)
    logger.debug("Loaded %d group(s) from %s", len(model.groups), path)
    return model
