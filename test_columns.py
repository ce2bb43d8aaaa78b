"""Responsive column count resolution."""

from grid_mcp.columns import (
    FALLBACK_CONTAINER_WIDTH,
    ColumnResolver,
    calculate_columns,
    is_mobile_screen,
)
from grid_mcp.engine import GridEngine
from grid_mcp.models import GridConfig, Widget


def test_calculate_columns_thresholds():
    assert calculate_columns(340, False) == 2
    assert calculate_columns(400, False) == 3
    assert calculate_columns(900, False) == 4
    assert calculate_columns(900, True) == 2


def test_calculate_columns_boundaries():
    assert calculate_columns(369) == 2
    assert calculate_columns(370) == 3
    assert calculate_columns(449) == 3
    assert calculate_columns(450) == 4


def test_mobile_breakpoint_is_inclusive():
    assert is_mobile_screen(1000)
    assert not is_mobile_screen(1001)


def test_initial_measurement_does_not_notify():
    calls = []
    resolver = ColumnResolver(GridConfig(container_width=400), lambda new, old: calls.append((new, old)))
    assert resolver.columns == 3
    assert calls == []


def test_set_container_width_notifies_on_change():
    calls = []
    resolver = ColumnResolver(GridConfig(container_width=500), lambda new, old: calls.append((new, old)))

    assert resolver.set_container_width(400) is True
    assert calls == [(3, 4)]

    assert resolver.set_container_width(420) is False
    assert calls == [(3, 4)]


def test_change_reported_without_callback():
    resolver = ColumnResolver(GridConfig(container_width=500))
    assert resolver.set_container_width(300) is True
    assert resolver.columns == 2


def test_screen_width_switches_to_mobile():
    resolver = ColumnResolver(GridConfig(container_width=900))
    assert resolver.columns == 4
    assert resolver.set_screen_width(800) is True
    assert resolver.is_mobile()
    assert resolver.columns == 2


def test_ensure_measured_uses_fallback_width():
    calls = []
    config = GridConfig()
    resolver = ColumnResolver(config, lambda new, old: calls.append((new, old)))

    resolver.ensure_measured()

    assert config.container_width == FALLBACK_CONTAINER_WIDTH
    assert resolver.columns == 2
    assert calls == []


def test_callback_can_rerun_auto_layout():
    widgets = [Widget(id="wide", x=0, y=0, w=4, h=1)]
    engine = GridEngine(GridConfig(container_width=500))
    seen = []

    def relayout(new_columns, old_columns):
        seen.append((new_columns, old_columns))
        engine.auto_layout(widgets)

    engine.on_columns_change = relayout
    assert engine.set_container_width(340) is True

    assert seen == [(2, 4)]
    assert widgets[0].x == 0
    assert widgets[0].w == 2
