"""YAML recipe parsing and serialization."""

import pytest
from pydantic import ValidationError

from grid_mcp.models import ColumnSizes, GridSize
from grid_mcp.parser import parse_yaml, recipe_to_yaml

RECIPE = """
title: Status tab
theme: light
preserve_order: true
grid:
  container_width: 420
  viewport_height: 640
widget_types:
  inventory:
    category: inventory
    min_size: {w: 2, h: 4}
    max_auto_size: {w: 3, h: 8}
  quests:
    max_auto_size:
      by_columns:
        2: {w: 2, h: 8}
        3: {w: 3, h: 10}
widgets:
  - {id: inv, type: inventory, x: 0, y: 0, w: 2, h: 6, config: {defaultViewMode: list}}
  - {id: q, type: quests, x: 2, y: 0}
"""


def test_parse_recipe():
    recipe = parse_yaml(RECIPE)

    assert recipe.title == "Status tab"
    assert recipe.theme == "light"
    assert recipe.preserve_order is True
    assert recipe.grid.container_width == 420
    assert recipe.grid.viewport_height == 640
    assert recipe.grid.gap == 0.75

    inventory = recipe.widget_types["inventory"]
    assert inventory.category == "inventory"
    assert inventory.resolve_min_size(2) == GridSize(w=2, h=4)

    quests = recipe.widget_types["quests"]
    assert isinstance(quests.max_auto_size, ColumnSizes)
    assert quests.resolve_max_auto_size(3) == GridSize(w=3, h=10)
    assert quests.resolve_min_size(3) == GridSize(w=1, h=1)

    inv = recipe.get_widget("inv")
    assert (inv.x, inv.y, inv.w, inv.h) == (0, 0, 2, 6)
    assert inv.config == {"defaultViewMode": "list"}
    q = recipe.get_widget("q")
    assert (q.w, q.h) == (1, 1)
    assert recipe.get_widget("missing") is None


def test_parse_nested_layout_key():
    recipe = parse_yaml("layout:\n  title: Nested\n  widgets:\n    - {id: a}\n")
    assert recipe.title == "Nested"
    assert [w.id for w in recipe.widgets] == ["a"]


def test_defaults_for_minimal_recipe():
    recipe = parse_yaml("widgets:\n  - {id: a, w: 2}\n")
    assert recipe.title == "Untitled Layout"
    assert recipe.theme == "dark"
    assert recipe.grid.container_width == 0
    assert recipe.widget_types == {}


def test_empty_input_rejected():
    with pytest.raises(ValueError):
        parse_yaml("")


def test_non_mapping_rejected():
    with pytest.raises(ValueError):
        parse_yaml("- a\n- b\n")


def test_invalid_widget_size_rejected():
    with pytest.raises(ValidationError):
        parse_yaml("widgets:\n  - {id: a, w: 0}\n")


def test_recipe_to_yaml_reparses():
    recipe = parse_yaml(RECIPE)
    text = recipe_to_yaml(recipe)

    assert "gap" not in text
    again = parse_yaml(text)
    assert again.grid.container_width == 420
    assert again.preserve_order is True
    assert again.widget_types["quests"].resolve_max_auto_size(2) == GridSize(w=2, h=8)
    assert [(w.id, w.x, w.y, w.w, w.h) for w in again.widgets] == [
        (w.id, w.x, w.y, w.w, w.h) for w in recipe.widgets
    ]
