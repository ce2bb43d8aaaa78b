"""MCP tool handlers."""

import asyncio
import json

from grid_mcp import server

RECIPE = """
title: Tools
grid:
  container_width: 340
widgets:
  - {id: a, x: 0, y: 0, w: 2, h: 2}
  - {id: b, x: 0, y: 1, w: 2, h: 2}
"""


def call(handler, args: dict):
    result = asyncio.run(handler(args))
    assert len(result) == 1
    return result[0].text


def call_json(handler, args: dict) -> dict:
    return json.loads(call(handler, args))


def test_resolve_columns():
    data = call_json(server._resolve_columns, {"container_width": 400})
    assert data["columns"] == 3
    assert data["is_mobile"] is False
    assert data["row_height_rem"] == 5.0

    mobile = call_json(server._resolve_columns, {"container_width": 900, "screen_width": 800})
    assert mobile["columns"] == 2
    assert mobile["row_height_rem"] == 3.5


def test_check_layout_reports_overlaps():
    data = call_json(server._check_layout, {"yaml_recipe": RECIPE})
    assert data["valid"] is False
    assert data["overlaps"] == [["a", "b"]]
    assert data["rows"] == 3


def test_check_layout_reports_out_of_bounds():
    data = call_json(server._check_layout, {
        "yaml_recipe": "widgets:\n  - {id: w, x: 1, w: 3}\n",
        "container_width": 340,
    })
    assert data["columns"] == 2
    assert data["out_of_bounds"] == ["w"]
    assert data["valid"] is False


def test_reflow_resolves_overlaps():
    data = call_json(server._reflow, {"yaml_recipe": RECIPE})
    positions = {w["id"]: w["y"] for w in data["widgets"]}
    assert positions == {"a": 0, "b": 2}


def test_reflow_dropped_widget():
    data = call_json(server._reflow, {"yaml_recipe": RECIPE, "dropped_id": "b"})
    assert data["reflowed"] is True
    positions = {w["id"]: w["y"] for w in data["widgets"]}
    assert positions == {"a": 0, "b": 2}

    missing = call(server._reflow, {"yaml_recipe": RECIPE, "dropped_id": "zzz"})
    assert missing == "Widget not found: zzz"


def test_auto_layout_tool():
    data = call_json(server._auto_layout, {"yaml_recipe": RECIPE})
    assert data["status"] == "success"
    assert data["columns"] == 2
    ids = [w["id"] for w in data["widgets"]]
    assert ids == ["a", "b"]
    assert "widgets:" in data["yaml"]


GROUPED_RECIPE = """
grid:
  container_width: 340
widget_types:
  inventory: {category: inventory, default_size: {w: 2, h: 2}, max_auto_size: {w: 2, h: 2}}
  userInfo: {category: user, default_size: {w: 2, h: 1}}
widgets:
  - {id: inv, type: inventory, x: 0, y: 0, w: 1, h: 1}
  - {id: info, type: userInfo, x: 0, y: 1, w: 2, h: 1}
"""


def test_auto_layout_groups_by_category():
    data = call_json(server._auto_layout, {"yaml_recipe": GROUPED_RECIPE, "group_by_category": True})

    widgets = {w["id"]: w for w in data["widgets"]}
    assert [w["id"] for w in data["widgets"]] == ["info", "inv"]
    assert (widgets["info"]["x"], widgets["info"]["y"]) == (0, 0)
    assert (widgets["inv"]["y"], widgets["inv"]["h"]) == (1, 2)
    assert data["rows"] == 3
    assert data["yaml"].index("id: info") < data["yaml"].index("id: inv")


def test_auto_layout_resets_sizes():
    data = call_json(server._auto_layout, {"yaml_recipe": GROUPED_RECIPE, "reset_sizes": True})

    widgets = {w["id"]: w for w in data["widgets"]}
    assert (widgets["inv"]["w"], widgets["inv"]["h"]) == (2, 2)
    assert widgets["info"]["w"] == 2
    assert data["rows"] >= 3


def test_auto_layout_reports_layout_error():
    text = call(server._auto_layout, {"yaml_recipe": "widgets:\n  - {id: a, h: 5000}\n"})
    assert text.startswith("Auto-layout failed")


def test_parse_failure_reported_as_text():
    text = call(server._auto_layout, {"yaml_recipe": ""})
    assert text.startswith("Failed to parse YAML recipe")


def test_viewport_rects():
    data = call_json(server._viewport_rects, {"yaml_recipe": RECIPE, "container_width": 400})
    assert data["columns"] == 3
    first = data["rects"][0]
    assert first["id"] == "a"
    assert first["css"]["left"] == "0.19%"
    assert first["css"]["top"] == "0.75rem"
    assert first["pixels"]["left"] == 12.0


def test_snap_to_cell():
    data = call_json(server._snap_to_cell, {"pixel_x": -50, "pixel_y": -50, "container_width": 400})
    assert (data["x"], data["y"]) == (0, 0)


def test_render_layout(tmp_path, monkeypatch):
    monkeypatch.setattr(server, "OUTPUT_DIR", tmp_path)
    data = call_json(server._render_layout, {"yaml_recipe": RECIPE, "filename": "tools", "scale": 1.0})
    assert data["status"] == "success"
    assert (tmp_path / "tools.png").exists()


def test_templates():
    data = call_json(server._list_templates, {})
    names = {t["name"] for t in data["templates"]}
    assert {"status-tab", "scene-tab", "inventory-tab"} <= names

    text = call(server._get_template, {"name": "status-tab"})
    assert "widgets:" in text
    assert call(server._get_template, {"name": "nope"}) == "Template not found: nope"
