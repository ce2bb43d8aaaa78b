"""Widget type registry and size rule resolution."""

import pytest

from grid_mcp.models import ColumnSizes, GridSize, SizeConstraint, Widget
from grid_mcp.registry import WidgetRegistry


def quests_constraint() -> SizeConstraint:
    return SizeConstraint(
        category="quests",
        min_size=GridSize(w=2, h=4),
        default_size=lambda columns: GridSize(w=2, h=5) if columns <= 2 else GridSize(w=3, h=7),
        max_auto_size=ColumnSizes(by_columns={2: GridSize(w=2, h=8), 3: GridSize(w=3, h=10)}),
    )


def test_register_and_lookup():
    registry = WidgetRegistry()
    registry.register("quests", quests_constraint())

    assert registry.has("quests")
    assert len(registry) == 1
    assert registry.get("quests").category == "quests"
    assert registry.get("missing") is None
    assert not registry.has("missing")


def test_register_rejects_empty_type():
    with pytest.raises(ValueError):
        WidgetRegistry().register("", SizeConstraint())


def test_column_aware_sizes():
    registry = WidgetRegistry()
    registry.register("quests", quests_constraint())

    assert registry.default_size("quests", 2) == GridSize(w=2, h=5)
    assert registry.default_size("quests", 4) == GridSize(w=3, h=7)
    assert registry.max_auto_size("quests", 2) == GridSize(w=2, h=8)
    assert registry.max_auto_size("quests", 4) == GridSize(w=3, h=10)
    assert registry.min_size("quests", 3) == GridSize(w=2, h=4)


def test_column_sizes_fall_back_to_smallest_key():
    sizes = ColumnSizes(by_columns={3: GridSize(w=3, h=2), 4: GridSize(w=4, h=2)})
    assert sizes.for_columns(2) == GridSize(w=3, h=2)
    assert sizes.for_columns(3) == GridSize(w=3, h=2)


def test_unknown_type_defaults():
    registry = WidgetRegistry()
    assert registry.min_size("nope", 2) == GridSize(w=1, h=1)
    assert registry.default_size("nope", 2) is None
    assert registry.max_auto_size("nope", 2) is None
    assert registry.category("nope") == "other"


def test_callable_may_return_mapping():
    registry = WidgetRegistry()
    registry.register("clock", SizeConstraint(default_size=lambda columns: {"w": 1, "h": columns}))
    assert registry.default_size("clock", 3) == GridSize(w=1, h=3)


def test_reset_sizes_to_default():
    registry = WidgetRegistry()
    registry.register("quests", quests_constraint())
    widgets = [
        Widget(id="q", type="quests", w=1, h=1),
        Widget(id="other", type="unknown", w=1, h=1),
        Widget(id="done", type="quests", w=3, h=7),
    ]

    changed = registry.reset_sizes_to_default(widgets, columns=3)

    assert changed == 1
    assert (widgets[0].w, widgets[0].h) == (3, 7)
    assert (widgets[1].w, widgets[1].h) == (1, 1)


def test_sort_by_category():
    registry = WidgetRegistry.from_constraints({
        "inventory": SizeConstraint(category="inventory"),
        "userStats": SizeConstraint(category="user"),
        "userInfo": SizeConstraint(category="user"),
        "weather": SizeConstraint(category="scene"),
        "quests": SizeConstraint(category="quests"),
    })
    widgets = [
        Widget(id="1", type="quests"),
        Widget(id="2", type="inventory"),
        Widget(id="3", type="mystery"),
        Widget(id="4", type="userStats"),
        Widget(id="5", type="weather"),
        Widget(id="6", type="userInfo"),
    ]

    ordered = registry.sort_by_category(widgets)

    assert [w.type for w in ordered] == [
        "userInfo", "userStats", "weather", "inventory", "quests", "mystery",
    ]
