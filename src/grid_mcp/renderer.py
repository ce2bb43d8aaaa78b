"""Layout preview renderer using Pillow. Draws widget footprints on the grid as PNG."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from .engine import GridEngine
from .models import LayoutRecipe, Widget
from .themes import get_theme, ThemePalette


# --- Font handling ---

def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a font, falling back to default if none available."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
    ]
    for fp in font_paths:
        if Path(fp).exists():
            return ImageFont.truetype(fp, size)
    return ImageFont.load_default()


def _load_bold_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a bold font, falling back to regular."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/usr/share/fonts/truetype/freefont/FreeSansBold.ttf",
        "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
    ]
    for fp in font_paths:
        if Path(fp).exists():
            return ImageFont.truetype(fp, size)
    return _load_font(size)


# --- Color helpers ---

def _hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert hex color to RGB tuple. Supports both 3-char and 6-char hex."""
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = "".join(c * 2 for c in hex_color)
    return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))


def _darken(hex_color: str, factor: float = 0.6) -> str:
    """Darken a hex color."""
    r, g, b = _hex_to_rgb(hex_color)
    return f"#{int(r * factor):02x}{int(g * factor):02x}{int(b * factor):02x}"


def _fit_text(text: str, font: ImageFont.FreeTypeFont, max_width: float) -> str:
    """Truncate text with an ellipsis so it fits max_width pixels."""
    if max_width <= 0:
        return ""
    bbox = font.getbbox(text)
    if bbox[2] - bbox[0] <= max_width:
        return text
    while text:
        text = text[:-1]
        candidate = text + "..."
        bbox = font.getbbox(candidate)
        if bbox[2] - bbox[0] <= max_width:
            return candidate
    return ""


# --- Main renderer ---

class LayoutRenderer:
    """Renders a layout recipe's widget footprints to a PNG image.

    Only footprints are drawn (id, type and size per widget); widget
    content is not this renderer's business.  Geometry comes straight
    from ``GridEngine.to_pixel_rect`` so the preview shows exactly what
    the engine computed.
    """

    TITLE_HEIGHT = 44
    WIDGET_PADDING = 8
    CORNER_RADIUS = 8
    BORDER_WIDTH = 2
    ACCENT_BAR = 4

    def __init__(self, scale: float = 1.0):
        self.scale = scale
        self.font_label = _load_bold_font(int(14 * scale))
        self.font_small = _load_font(int(11 * scale))
        self.font_title = _load_bold_font(int(18 * scale))
        self.theme: ThemePalette = get_theme("dark")

    def render(
        self,
        recipe: LayoutRecipe,
        output_path: Optional[str] = None,
        engine: Optional[GridEngine] = None,
        auto_layout: bool = False,
    ) -> bytes:
        """Render the recipe to PNG bytes. Optionally save to file.

        Args:
            recipe: The layout to draw.
            output_path: Optional path to save the PNG.
            engine: Engine to take geometry from; built from the recipe
                    when omitted.
            auto_layout: Repack the recipe's widgets before drawing.
        """
        self.theme = get_theme(recipe.theme)
        engine = engine or GridEngine.from_recipe(recipe)
        engine.resolver.ensure_measured()

        if auto_layout:
            engine.auto_layout(recipe.widgets, preserve_order=recipe.preserve_order)

        img = self.render_image(recipe.widgets, engine, title=recipe.title)

        buf = BytesIO()
        img.save(buf, format="PNG", optimize=True)
        png_bytes = buf.getvalue()

        if output_path:
            Path(output_path).write_bytes(png_bytes)

        return png_bytes

    def render_image(
        self,
        widgets: list[Widget],
        engine: GridEngine,
        title: Optional[str] = None,
    ) -> Image.Image:
        """Draw widgets onto a new RGBA image sized to the grid."""
        s = self.scale
        transform = engine.transform
        engine.resolver.ensure_measured()

        rows = max((w.y + w.h for w in widgets), default=0)
        visible_rows = engine.max_visible_rows() if engine.config.viewport_height else None
        draw_rows = max(rows, visible_rows or 0, 1)

        row_pitch = transform.rem_to_pixels(transform.row_height + transform.gap)
        gap_px = transform.rem_to_pixels(transform.gap)
        title_offset = self.TITLE_HEIGHT if title else 0

        img_width = int(engine.config.container_width * s)
        img_height = int((draw_rows * row_pitch + gap_px + title_offset) * s)

        img = Image.new("RGBA", (img_width, img_height), self.theme.background)
        draw = ImageDraw.Draw(img)

        if title:
            self._draw_title(draw, title, img_width)

        self._draw_cells(draw, engine, draw_rows, title_offset)

        for widget in widgets:
            self._draw_widget(draw, widget, engine, title_offset)

        if visible_rows is not None and visible_rows < draw_rows:
            fold_y = (visible_rows * row_pitch + gap_px / 2 + title_offset) * s
            draw.line([(0, fold_y), (img_width, fold_y)], fill=self.theme.fold_line, width=max(1, int(s)))

        return img

    def _draw_title(self, draw: ImageDraw.ImageDraw, title: str, img_width: int):
        """Draw the layout title centered at the top."""
        bbox = self.font_title.getbbox(title)
        tw = bbox[2] - bbox[0]
        x = (img_width - tw) / 2
        draw.text((x, 12 * self.scale), title, fill=self.theme.title_color, font=self.font_title)

    def _draw_cells(self, draw: ImageDraw.ImageDraw, engine: GridEngine, rows: int, oy: float):
        """Draw every empty grid cell as a faint outline."""
        s = self.scale
        for row in range(rows):
            for col in range(engine.columns):
                cell = engine.to_pixel_rect(Widget(id=f"cell-{col}-{row}", x=col, y=row))
                draw.rounded_rectangle(
                    [cell.left * s, (cell.top + oy) * s,
                     (cell.left + cell.width) * s, (cell.top + cell.height + oy) * s],
                    radius=int(4 * s),
                    fill=self.theme.cell_fill,
                    outline=self.theme.cell_border,
                    width=1,
                )

    def _draw_widget(self, draw: ImageDraw.ImageDraw, widget: Widget, engine: GridEngine, oy: float):
        """Draw a single widget footprint with its accent bar and labels."""
        s = self.scale
        rect = engine.to_pixel_rect(widget)
        category = engine.registry.category(widget.type) if engine.registry else "other"
        accent = self.theme.accent_for(category)

        x = rect.left * s
        y = (rect.top + oy) * s
        w = rect.width * s
        h = rect.height * s

        draw.rounded_rectangle(
            [x, y, x + w, y + h],
            radius=int(self.CORNER_RADIUS * s),
            fill=self.theme.widget_fill,
            outline=accent,
            width=max(1, int(self.BORDER_WIDTH * s)),
        )
        draw.rounded_rectangle(
            [x + 2, y + 2, x + w - 2, y + int(self.ACCENT_BAR * s) + 2],
            radius=int(self.CORNER_RADIUS * s),
            fill=accent,
        )

        pad = self.WIDGET_PADDING * s
        max_text = w - 2 * pad
        label_y = y + int(self.ACCENT_BAR * s) + pad
        draw.text(
            (x + pad, label_y),
            _fit_text(widget.id, self.font_label, max_text),
            fill=self.theme.widget_label,
            font=self.font_label,
        )

        # Size badge in the bottom-right, type in the bottom-left
        size_text = f"{widget.w}×{widget.h}"
        size_bbox = self.font_small.getbbox(size_text)
        size_w = size_bbox[2] - size_bbox[0] + 10
        size_h = size_bbox[3] - size_bbox[1] + 6
        badge_x = x + w - size_w - pad
        badge_y = y + h - size_h - pad
        draw.rounded_rectangle(
            [badge_x, badge_y, badge_x + size_w, badge_y + size_h],
            radius=4,
            fill=_darken(accent, 0.3),
        )
        draw.text((badge_x + 5, badge_y + 2), size_text, fill=accent, font=self.font_small)

        draw.text(
            (x + pad, badge_y + 2),
            _fit_text(widget.type, self.font_small, badge_x - x - 2 * pad),
            fill=self.theme.widget_text,
            font=self.font_small,
        )
