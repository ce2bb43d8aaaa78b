"""
Theme definitions for Grid-MCP layout previews.

Provides dark and light color palettes for rendering grid layouts.
Each theme defines colors for:
- Preview background and title
- Empty grid cells
- Widget footprints (fill, border, text)
- The visible-area fold line
- Accent colors per widget category
"""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class ThemePalette:
    """Color palette for a theme."""

    # Preview
    background: str
    title_color: str
    muted_text_color: str

    # Grid cells
    cell_fill: str
    cell_border: str

    # Widgets
    widget_fill: str
    widget_label: str
    widget_text: str

    # Rows past this line are outside the visible area
    fold_line: str

    category_accents: dict[str, str] = field(default_factory=dict)

    def accent_for(self, category: str) -> str:
        return self.category_accents.get(category, self.category_accents.get("other", "#999999"))


_CATEGORY_ACCENTS = {
    "user": "#2196F3",       # Blue
    "scene": "#00BCD4",      # Cyan
    "social": "#9C27B0",     # Purple
    "inventory": "#FF9800",  # Orange
    "quests": "#4CAF50",     # Green
    "other": "#999999",      # Gray
}


# Catppuccin Mocha (dark theme) - default
DARK_THEME = ThemePalette(
    background="#11111b",
    title_color="#cdd6f4",
    muted_text_color="#6c7086",
    cell_fill="#181825",
    cell_border="#313244",
    widget_fill="#1e1e2e",
    widget_label="#cdd6f4",
    widget_text="#a6adc8",
    fold_line="#F44336",
    category_accents=dict(_CATEGORY_ACCENTS),
)


# Light theme - clean white background with darker accents
LIGHT_THEME = ThemePalette(
    background="#ffffff",
    title_color="#1e1e2e",
    muted_text_color="#6c6f85",
    cell_fill="#e6e9ef",
    cell_border="#bcc0cc",
    widget_fill="#eff1f5",
    widget_label="#1e1e2e",
    widget_text="#4c4f69",
    fold_line="#d20f39",
    category_accents=dict(_CATEGORY_ACCENTS),
)


# Theme registry
THEMES: dict[str, ThemePalette] = {
    "dark": DARK_THEME,
    "light": LIGHT_THEME,
}


def get_theme(name: str) -> ThemePalette:
    """Get a theme palette by name.

    Args:
        name: Theme name ("dark" or "light")

    Returns:
        ThemePalette for the requested theme

    Raises:
        ValueError: If theme name is not recognized
    """
    if name not in THEMES:
        valid = ", ".join(THEMES.keys())
        raise ValueError(f"Unknown theme '{name}'. Valid themes: {valid}")
    return THEMES[name]
