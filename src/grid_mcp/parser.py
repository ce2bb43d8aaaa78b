"""YAML recipe parser for Grid-MCP.

A recipe describes one grid scenario:

    title: Status tab
    theme: dark
    preserve_order: true
    grid:
      container_width: 420
      screen_width: 1920
      row_height: 5
      gap: 0.75
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
      - {id: inv, type: inventory, x: 0, y: 0, w: 2, h: 6}

Only ``widgets`` is required; everything else has defaults.
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional

import yaml

from .models import (
    ColumnSizes,
    GridConfig,
    GridSize,
    LayoutRecipe,
    SizeConstraint,
    SizeSpec,
    Widget,
)


def parse_yaml(yaml_str: str) -> LayoutRecipe:
    """Parse a YAML string into a LayoutRecipe."""
    data = yaml.safe_load(yaml_str)
    if not data:
        raise ValueError("Empty YAML input")
    if not isinstance(data, dict):
        raise ValueError("Recipe must be a YAML mapping")

    # Accept a recipe nested under a top-level "layout" key
    if "layout" in data and isinstance(data["layout"], dict):
        data = data["layout"]

    widget_types = {
        str(name): _parse_size_constraint(spec or {})
        for name, spec in (data.get("widget_types") or {}).items()
    }

    return LayoutRecipe(
        title=data.get("title", "Untitled Layout"),
        theme=data.get("theme", "dark"),
        grid=GridConfig(**(data.get("grid") or {})),
        widget_types=widget_types,
        widgets=[_parse_widget(w) for w in data.get("widgets") or []],
        preserve_order=bool(data.get("preserve_order", False)),
    )


def parse_file(path: str) -> LayoutRecipe:
    """Parse a YAML file into a LayoutRecipe."""
    content = Path(path).read_text()
    return parse_yaml(content)


def _parse_widget(data: dict) -> Widget:
    """Parse a single widget from YAML data."""
    return Widget(
        id=str(data["id"]),
        type=data.get("type", "default"),
        x=int(data.get("x", 0)),
        y=int(data.get("y", 0)),
        w=int(data.get("w", 1)),
        h=int(data.get("h", 1)),
        config=data.get("config") or {},
    )


def _parse_size(data: Optional[dict]) -> Optional[SizeSpec]:
    if data is None:
        return None
    if "by_columns" in data:
        return ColumnSizes(
            by_columns={int(k): GridSize(**v) for k, v in data["by_columns"].items()}
        )
    return GridSize(**data)


def _parse_size_constraint(data: dict) -> SizeConstraint:
    constraint = SizeConstraint(
        label=data.get("label"),
        category=data.get("category", "other"),
        default_size=_parse_size(data.get("default_size")),
        max_auto_size=_parse_size(data.get("max_auto_size")),
    )
    if data.get("min_size") is not None:
        constraint.min_size = _parse_size(data["min_size"])
    return constraint


def _size_to_data(spec: Optional[SizeSpec]) -> Optional[dict]:
    """Serialize a size spec; callables have no YAML form and are dropped."""
    if isinstance(spec, GridSize):
        return {"w": spec.w, "h": spec.h}
    if isinstance(spec, ColumnSizes):
        return {
            "by_columns": {
                k: {"w": v.w, "h": v.h} for k, v in sorted(spec.by_columns.items())
            }
        }
    return None


def recipe_to_yaml(recipe: LayoutRecipe) -> str:
    """Serialize a LayoutRecipe back to YAML."""
    defaults = GridConfig()
    grid = {
        k: v for k, v in recipe.grid.model_dump().items()
        if v is not None and v != getattr(defaults, k)
    }

    data: dict = {"title": recipe.title, "theme": recipe.theme}
    if recipe.preserve_order:
        data["preserve_order"] = True
    if grid:
        data["grid"] = grid

    if recipe.widget_types:
        types_data = {}
        for name, constraint in recipe.widget_types.items():
            type_data: dict = {"category": constraint.category}
            if constraint.label:
                type_data["label"] = constraint.label
            for field in ("min_size", "default_size", "max_auto_size"):
                size_data = _size_to_data(getattr(constraint, field))
                if size_data is not None:
                    type_data[field] = size_data
            types_data[name] = type_data
        data["widget_types"] = types_data

    widgets_data = []
    for widget in recipe.widgets:
        widget_data = {
            "id": widget.id,
            "type": widget.type,
            "x": widget.x,
            "y": widget.y,
            "w": widget.w,
            "h": widget.h,
        }
        if widget.config:
            widget_data["config"] = widget.config
        widgets_data.append(widget_data)
    data["widgets"] = widgets_data

    return yaml.dump(data, default_flow_style=False, sort_keys=False)
