"""PNG layout previews."""

from io import BytesIO

import pytest
from PIL import Image

from grid_mcp.engine import GridEngine
from grid_mcp.parser import parse_yaml
from grid_mcp.renderer import LayoutRenderer
from grid_mcp.themes import DARK_THEME, get_theme

RECIPE = """
title: Preview
grid:
  container_width: 400
  viewport_height: 300
widget_types:
  inventory: {category: inventory}
widgets:
  - {id: inventory-with-a-very-long-name, type: inventory, x: 0, y: 0, w: 2, h: 3}
  - {id: clock, x: 2, y: 0, w: 1, h: 1}
  - {id: notes, x: 0, y: 4, w: 3, h: 2}
"""


def test_render_writes_png(tmp_path):
    recipe = parse_yaml(RECIPE)
    output = tmp_path / "preview.png"

    png = LayoutRenderer(scale=1.0).render(recipe, output_path=str(output))

    assert png.startswith(b"\x89PNG")
    assert output.read_bytes() == png
    image = Image.open(BytesIO(png))
    assert image.width == 400


def test_render_scales_image():
    recipe = parse_yaml(RECIPE)
    image = Image.open(BytesIO(LayoutRenderer(scale=2.0).render(recipe)))
    assert image.width == 800


def test_render_image_height_covers_layout():
    recipe = parse_yaml(RECIPE)
    engine = GridEngine.from_recipe(recipe)

    image = LayoutRenderer().render_image(recipe.widgets, engine)

    # 6 rows of 80px plus 7 gaps of 12px
    assert image.height == 6 * 92 + 12


def test_render_with_auto_layout_repacks_widgets():
    recipe = parse_yaml(RECIPE.replace("x: 0, y: 4", "x: 0, y: 9"))
    LayoutRenderer().render(recipe, auto_layout=True)
    assert recipe.get_widget("notes").y < 9


def test_unmeasured_container_renders_at_fallback_width():
    recipe = parse_yaml("widgets:\n  - {id: a, w: 2, h: 2}\n")
    image = Image.open(BytesIO(LayoutRenderer().render(recipe)))
    assert image.width == 350


def test_themes():
    assert get_theme("dark") is DARK_THEME
    assert get_theme("light").accent_for("inventory") == "#FF9800"
    assert DARK_THEME.accent_for("unknown") == DARK_THEME.accent_for("other")
    with pytest.raises(ValueError):
        get_theme("neon")
