"""Tests for group model loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from deltaforge.core.errors import GroupModelError
from deltaforge.core.model_loader import load_group_model, parse_group_model
from deltaforge.models.resources import ResourceType


class TestParseGroupModel:
    def test_string_and_object_resources(self):
        model = parse_group_model({
            "groups": [
                {
                    "name": "g1",
                    "resources": [
                        "css/a.css",
                        {"uri": "js/b.js"},
                        {"uri": "theme.less", "type": "css"},
                    ],
                }
            ]
        })
        types = [r.type for r in model.get_group("g1").resources]
        assert types == [ResourceType.CSS, ResourceType.JS, ResourceType.CSS]

    def test_group_without_resources(self):
        model = parse_group_model({"groups": [{"name": "empty"}]})
        assert model.get_group("empty").resources == []

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {},
            {"groups": "nope"},
            {"groups": [{"resources": []}]},
            {"groups": [{"name": "g", "resources": [{"uri": "a.css", "type": "sass"}]}]},
            {"groups": [{"name": "g"}, {"name": "g"}]},
        ],
    )
    def test_invalid_models_rejected(self, data):
        with pytest.raises(GroupModelError):
            parse_group_model(data)


class TestLoadGroupModel:
    def test_loads_file(self, webapp: Path):
        model = load_group_model(webapp / "groups.json")
        assert model.group_names == ["core", "vendor"]

    def test_missing_file(self, tmp_dir: Path):
        with pytest.raises(GroupModelError, match="not found"):
            load_group_model(tmp_dir / "absent.json")

    def test_invalid_json(self, tmp_dir: Path):
        path = tmp_dir / "groups.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(GroupModelError, match="Cannot read"):
            load_group_model(path)

    def test_round_trip_order(self, tmp_dir: Path):
        path = tmp_dir / "groups.json"
        names = ["zeta", "alpha", "mid"]
        path.write_text(
            json.dumps({"groups": [{"name": n, "resources": []} for n in names]}),
            encoding="utf-8",
        )
        assert load_group_model(path).group_names == names
