"""UI theme definitions and selection helpers.

Themes are ANSI palettes for cards, headers, help text, and error screens.
The plain theme carries no escape codes so layout can be tested as text.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    bold: str
    title: str
    header: str
    card_border: str
    card_border_selected: str
    author: str
    community: str
    accent: str
    muted: str
    help: str
    upvoted: str
    error_title: str
    error_text: str
    input_placeholder: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    bold="\033[1m",
    title="\033[1;38;5;231;48;5;202m",
    header="\033[1;38;5;202m",
    card_border="\033[38;5;245m",
    card_border_selected="\033[38;5;202m",
    author="\033[3;38;5;45m",
    community="\033[1;38;5;202m",
    accent="\033[38;5;45m",
    muted="\033[38;5;245m",
    help="\033[3;38;5;245m",
    upvoted="\033[1;38;5;202m",
    error_title="\033[1;38;5;231;48;5;196m",
    error_text="\033[1;38;5;203m",
    input_placeholder="\033[2;38;5;250m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    bold="\033[1m",
    title="\033[1;38;5;231;48;5;25m",
    header="\033[1;38;5;39m",
    card_border="\033[2;38;5;31m",
    card_border_selected="\033[38;5;45m",
    author="\033[3;38;5;153m",
    community="\033[1;38;5;45m",
    accent="\033[38;5;117m",
    muted="\033[2;38;5;110m",
    help="\033[3;38;5;110m",
    upvoted="\033[1;38;5;215m",
    error_title="\033[1;38;5;231;48;5;160m",
    error_text="\033[1;38;5;210m",
    input_placeholder="\033[2;38;5;110m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    bold="",
    title="",
    header="",
    card_border="",
    card_border_selected="",
    author="",
    community="",
    accent="",
    muted="",
    help="",
    upvoted="",
    error_title="",
    error_text="",
    input_placeholder="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    if name and str(name).strip().lower() == PLAIN_THEME.name:
        return PLAIN_THEME
    return _THEMES.get(normalize_theme_name(name), DEFAULT_THEME)


def paint(style: str, text: str, theme: UITheme) -> str:
    """Wrap ``text`` in ``style`` and a reset, or return it bare for empty styles."""
    if not style or not text:
        return text
    return f"{style}{text}{theme.reset}"


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "paint",
    "resolve_theme",
]
