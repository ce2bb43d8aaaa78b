"""Grid-MCP server: MCP tools for laying out widgets on a responsive grid."""

from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .autolayout import is_valid_layout, layout_extent
from .collision import find_overlapping_pairs
from .engine import GridEngine
from .models import GridConfig, LayoutError, LayoutRecipe, Widget
from .parser import parse_yaml, recipe_to_yaml
from .renderer import LayoutRenderer

logger = logging.getLogger(__name__)


# --- Constants ---
OUTPUT_DIR = Path(os.environ.get("GRID_OUTPUT_DIR", Path.home() / ".grid-mcp" / "previews"))
TEMPLATES_DIR = Path(__file__).parent / "templates"

server = Server("grid-mcp")


def _ensure_output_dir():
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)


_RECIPE_PROPERTY = {
    "type": "string",
    "description": (
        "YAML layout recipe. Example:\n"
        "title: Status tab\n"
        "grid:\n"
        "  container_width: 420\n"
        "  viewport_height: 640\n"
        "widget_types:\n"
        "  userInfo: {category: user, min_size: {w: 2, h: 2}}\n"
        "widgets:\n"
        "  - {id: info, type: userInfo, x: 0, y: 0, w: 2, h: 2}\n"
        "  - {id: mood, type: userMood, x: 2, y: 0, w: 1, h: 1}\n"
        "\n"
        "Only 'widgets' is required. Grid units: x/y are the top-left cell, "
        "w/h the footprint in columns and rows."
    ),
}

_CONTAINER_WIDTH_PROPERTY = {
    "type": "number",
    "description": "Override the recipe's container width in pixels (sets the column count).",
}


# --- Tool definitions ---

@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="auto_layout",
            description=(
                "Repack every widget in a recipe for the grid's column count: "
                "largest first (or in recipe order), lifted into gaps, then grown "
                "into free space up to each type's max_auto_size. "
                "Returns the new positions and the updated YAML recipe."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_recipe": _RECIPE_PROPERTY,
                    "container_width": _CONTAINER_WIDTH_PROPERTY,
                    "preserve_order": {
                        "type": "boolean",
                        "description": "Keep the widget order instead of sorting by area. Default: recipe setting.",
                    },
                    "group_by_category": {
                        "type": "boolean",
                        "description": (
                            "Sort widgets by type category (user, scene, social, inventory, "
                            "quests, other) and pack them in that order. Default: false."
                        ),
                        "default": False,
                    },
                    "reset_sizes": {
                        "type": "boolean",
                        "description": "Reset widgets to their type's default size before packing. Default: false.",
                        "default": False,
                    },
                },
                "required": ["yaml_recipe"],
            },
        ),
        Tool(
            name="reflow",
            description=(
                "Resolve overlaps by pushing widgets down in reading order. "
                "With 'dropped_id', only reflows if that widget lands on others, "
                "and the dropped widget keeps its cell."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_recipe": _RECIPE_PROPERTY,
                    "dropped_id": {
                        "type": "string",
                        "description": "Id of the widget that was just dropped.",
                    },
                },
                "required": ["yaml_recipe"],
            },
        ),
        Tool(
            name="resolve_columns",
            description="Column count, device class and row height for a container and screen width.",
            inputSchema={
                "type": "object",
                "properties": {
                    "container_width": {"type": "number", "description": "Container width in pixels."},
                    "screen_width": {
                        "type": "number",
                        "description": "Screen width in pixels (<= 1000 is mobile). Default: 1920.",
                        "default": 1920,
                    },
                },
                "required": ["container_width"],
            },
        ),
        Tool(
            name="viewport_rects",
            description=(
                "Render-ready rectangles for every widget: left/width as % of the "
                "container, top/height in rem, plus absolute pixel rectangles."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_recipe": _RECIPE_PROPERTY,
                    "container_width": _CONTAINER_WIDTH_PROPERTY,
                },
                "required": ["yaml_recipe"],
            },
        ),
        Tool(
            name="snap_to_cell",
            description="Nearest grid cell for a pixel position inside the container.",
            inputSchema={
                "type": "object",
                "properties": {
                    "pixel_x": {"type": "number"},
                    "pixel_y": {"type": "number"},
                    "container_width": {"type": "number", "description": "Container width in pixels."},
                    "screen_width": {"type": "number", "default": 1920},
                    "row_height": {"type": "number", "description": "Row height in rem."},
                    "gap": {"type": "number", "description": "Gap in rem. Default: 0.75."},
                },
                "required": ["pixel_x", "pixel_y", "container_width"],
            },
        ),
        Tool(
            name="check_layout",
            description=(
                "Check a recipe's layout: overlapping pairs, widgets outside the "
                "columns, vertical extent and widgets below the visible area."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_recipe": _RECIPE_PROPERTY,
                    "container_width": _CONTAINER_WIDTH_PROPERTY,
                },
                "required": ["yaml_recipe"],
            },
        ),
        Tool(
            name="render_layout",
            description=(
                "Render a preview PNG of the recipe's widget footprints on the grid. "
                "Returns the path to the rendered PNG file."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_recipe": _RECIPE_PROPERTY,
                    "container_width": _CONTAINER_WIDTH_PROPERTY,
                    "scale": {
                        "type": "number",
                        "description": "Render scale factor (default 2.0 for crisp, legible output)",
                        "default": 2.0,
                    },
                    "filename": {
                        "type": "string",
                        "description": "Output filename (without extension). Default: auto-generated UUID.",
                    },
                    "auto_layout": {
                        "type": "boolean",
                        "description": "Repack the widgets before rendering. Default: false.",
                        "default": False,
                    },
                },
                "required": ["yaml_recipe"],
            },
        ),
        Tool(
            name="list_templates",
            description="List available layout recipe templates that can be used as starting points.",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
        Tool(
            name="get_template",
            description="Get the YAML content of a specific template by name.",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Template name (from list_templates output)",
                    },
                },
                "required": ["name"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    if name == "auto_layout":
        return await _auto_layout(arguments)
    elif name == "reflow":
        return await _reflow(arguments)
    elif name == "resolve_columns":
        return await _resolve_columns(arguments)
    elif name == "viewport_rects":
        return await _viewport_rects(arguments)
    elif name == "snap_to_cell":
        return await _snap_to_cell(arguments)
    elif name == "check_layout":
        return await _check_layout(arguments)
    elif name == "render_layout":
        return await _render_layout(arguments)
    elif name == "list_templates":
        return await _list_templates(arguments)
    elif name == "get_template":
        return await _get_template(arguments)
    else:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]


# --- Helpers ---

def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def _json(payload: dict) -> list[TextContent]:
    return _text(json.dumps(payload))


def _load(args: dict) -> tuple[LayoutRecipe, GridEngine]:
    """Parse the recipe argument and build an engine for it."""
    recipe = parse_yaml(args["yaml_recipe"])
    if args.get("container_width") is not None:
        recipe.grid.container_width = float(args["container_width"])
    engine = GridEngine.from_recipe(recipe)
    return recipe, engine


def _widget_payload(widget: Widget) -> dict:
    return {"id": widget.id, "type": widget.type, "x": widget.x, "y": widget.y, "w": widget.w, "h": widget.h}


# --- Tool handlers ---

async def _auto_layout(args: dict) -> list[TextContent]:
    """Repack a recipe's widgets."""
    try:
        recipe, engine = _load(args)
    except Exception as e:
        return _text(f"Failed to parse YAML recipe: {e}")

    preserve_order = args.get("preserve_order", recipe.preserve_order)
    widgets = recipe.widgets

    try:
        if args.get("reset_sizes", False):
            engine.registry.reset_sizes_to_default(widgets, engine.columns)
        if args.get("group_by_category", False):
            widgets = engine.registry.sort_by_category(widgets)
            recipe.widgets = widgets
            preserve_order = True
        engine.auto_layout(widgets, preserve_order=preserve_order)
    except LayoutError as e:
        logger.warning(f"Auto-layout failed for '{recipe.title}': {e}")
        return _text(f"Auto-layout failed: {e}")

    return _json({
        "status": "success",
        "title": recipe.title,
        "columns": engine.columns,
        "rows": layout_extent(widgets),
        "widgets": [_widget_payload(w) for w in widgets],
        "yaml": recipe_to_yaml(recipe),
    })


async def _reflow(args: dict) -> list[TextContent]:
    """Push overlapping widgets down."""
    try:
        recipe, engine = _load(args)
    except Exception as e:
        return _text(f"Failed to parse YAML recipe: {e}")

    dropped_id = args.get("dropped_id")
    try:
        if dropped_id:
            dropped = recipe.get_widget(dropped_id)
            if dropped is None:
                return _text(f"Widget not found: {dropped_id}")
            reflowed = engine.drop_widget(dropped, recipe.widgets)
        else:
            engine.reflow(recipe.widgets)
            reflowed = True
    except LayoutError as e:
        logger.warning(f"Reflow failed for '{recipe.title}': {e}")
        return _text(f"Reflow failed: {e}")

    return _json({
        "status": "success",
        "reflowed": reflowed,
        "widgets": [_widget_payload(w) for w in recipe.widgets],
        "yaml": recipe_to_yaml(recipe),
    })


async def _resolve_columns(args: dict) -> list[TextContent]:
    """Column count for a container width."""
    config = GridConfig(
        container_width=float(args["container_width"]),
        screen_width=float(args.get("screen_width", 1920)),
    )
    engine = GridEngine(config)
    return _json({
        "columns": engine.columns,
        "is_mobile": engine.is_mobile(),
        "row_height_rem": engine.transform.row_height,
        "gap_rem": engine.transform.gap,
    })


async def _viewport_rects(args: dict) -> list[TextContent]:
    """Viewport and pixel rectangles per widget."""
    try:
        recipe, engine = _load(args)
    except Exception as e:
        return _text(f"Failed to parse YAML recipe: {e}")

    rects = []
    for widget in recipe.widgets:
        pixel = engine.to_pixel_rect(widget)
        rects.append({
            "id": widget.id,
            "css": engine.to_viewport_rect(widget).to_css(),
            "pixels": {
                "left": round(pixel.left, 2),
                "top": round(pixel.top, 2),
                "width": round(pixel.width, 2),
                "height": round(pixel.height, 2),
            },
        })

    return _json({
        "columns": engine.columns,
        "container_width": engine.config.container_width,
        "grid_height_rem": engine.grid_height(recipe.widgets),
        "rects": rects,
    })


async def _snap_to_cell(args: dict) -> list[TextContent]:
    """Pixel position to grid cell."""
    try:
        config = GridConfig(
            container_width=float(args["container_width"]),
            screen_width=float(args.get("screen_width", 1920)),
            row_height=args.get("row_height"),
            gap=float(args.get("gap", 0.75)),
        )
    except Exception as e:
        return _text(f"Invalid grid settings: {e}")

    engine = GridEngine(config)
    cell = engine.snap_to_cell(float(args["pixel_x"]), float(args["pixel_y"]))
    return _json({"columns": engine.columns, "x": cell.x, "y": cell.y})


async def _check_layout(args: dict) -> list[TextContent]:
    """Report overlaps, out-of-bounds widgets and extent."""
    try:
        recipe, engine = _load(args)
    except Exception as e:
        return _text(f"Failed to parse YAML recipe: {e}")

    widgets = recipe.widgets
    columns = engine.columns
    visible_rows = engine.max_visible_rows()

    return _json({
        "valid": is_valid_layout(widgets, columns),
        "columns": columns,
        "overlaps": [[a.id, b.id] for a, b in find_overlapping_pairs(widgets)],
        "out_of_bounds": [w.id for w in widgets if w.x + w.w > columns],
        "rows": layout_extent(widgets),
        "grid_height_rem": engine.grid_height(widgets),
        "max_visible_rows": visible_rows,
        "below_fold": [w.id for w in widgets if w.y + w.h > visible_rows],
    })


async def _render_layout(args: dict) -> list[TextContent]:
    """Render a recipe preview to PNG."""
    _ensure_output_dir()

    try:
        recipe, engine = _load(args)
    except Exception as e:
        return _text(f"Failed to parse YAML recipe: {e}")

    scale = args.get("scale", 2.0)
    filename = args.get("filename", str(uuid.uuid4())[:8])
    auto_layout = args.get("auto_layout", False)

    renderer = LayoutRenderer(scale=scale)
    output_path = str(OUTPUT_DIR / f"{filename}.png")

    try:
        renderer.render(recipe, output_path=output_path, engine=engine, auto_layout=auto_layout)
    except Exception as e:
        logger.warning(f"Rendering '{recipe.title}' failed: {e}")
        return _text(f"Rendering failed: {e}")

    return _json({
        "status": "success",
        "path": output_path,
        "title": recipe.title,
        "columns": engine.columns,
        "widgets": len(recipe.widgets),
        "rows": layout_extent(recipe.widgets),
        "auto_layout": auto_layout,
    })


async def _list_templates(args: dict) -> list[TextContent]:
    """List available template files."""
    templates = []

    if TEMPLATES_DIR.exists():
        for f in sorted(TEMPLATES_DIR.glob("*.yaml")) + sorted(TEMPLATES_DIR.glob("*.yml")):
            templates.append({
                "name": f.stem,
                "path": str(f),
            })

    return _json({"templates": templates})


async def _get_template(args: dict) -> list[TextContent]:
    """Get template content by name."""
    name = args["name"]

    for ext in [".yaml", ".yml"]:
        path = TEMPLATES_DIR / f"{name}{ext}"
        if path.exists():
            return _text(path.read_text())

    return _text(f"Template not found: {name}")


def main():
    """Entry point for the MCP server."""
    import asyncio

    # stdout carries the MCP stream; basicConfig logs to stderr
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(_run())


async def _run():
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    main()
