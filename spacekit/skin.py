"""Colours and styles used to render the terminal views."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import ClassVar


@dataclass(frozen=True)
class Color:
    """A terminal colour: either a named palette colour or an RGB value."""

    name: str
    rgb: tuple[int, int, int] | None = None

    WHITE: ClassVar[Color]
    BLUE: ClassVar[Color]
    GRAY: ClassVar[Color]
    DARK_GRAY: ClassVar[Color]
    LIGHT_RED: ClassVar[Color]

    @classmethod
    def from_rgb(cls, red: int, green: int, blue: int) -> Color:
        """Create a true-colour value."""
        for component in (red, green, blue):
            if not 0 <= component <= 255:
                raise ValueError(f"colour component {component} is out of range 0..255")
        return cls("rgb", (red, green, blue))


Color.WHITE = Color("white")
Color.BLUE = Color("blue")
Color.GRAY = Color("gray")
Color.DARK_GRAY = Color("dark_gray")
Color.LIGHT_RED = Color("light_red")


class Modifier(enum.Flag):
    """Text attributes that can be combined."""

    NONE = 0
    BOLD = enum.auto()
    DIM = enum.auto()
    ITALIC = enum.auto()
    UNDERLINED = enum.auto()
    REVERSED = enum.auto()


@dataclass(frozen=True)
class Style:
    """An immutable text style; the builder methods return new styles."""

    foreground: Color | None = None
    background: Color | None = None
    modifiers: Modifier = Modifier.NONE

    def fg(self, color: Color) -> Style:
        return replace(self, foreground=color)

    def bg(self, color: Color) -> Style:
        return replace(self, background=color)

    def add_modifier(self, modifier: Modifier) -> Style:
        return replace(self, modifiers=self.modifiers | modifier)


@dataclass(frozen=True)
class Skin:
    """The colour scheme of the views. The defaults form the dark-mode skin."""

    title_fg_color: Color = Color.WHITE
    title_bg_color: Color = Color.from_rgb(64, 64, 64)
    version_fg_color: Color = Color.from_rgb(192, 192, 192)
    table_header_bg_color: Color = Color.from_rgb(64, 64, 176)
    table_header_fg_color: Color = Color.WHITE
    value_fg_color: Color | None = Color.from_rgb(88, 144, 255)
    value_style_reversed: bool = False
    delete_warning_text_fg_color: Color = Color.from_rgb(255, 165, 0)
    key_help_danger_bg_color: Color = Color.from_rgb(192, 64, 64)
    key_help_key_fg_color: Color = Color.from_rgb(192, 192, 192)
    item_type_directory_symbol: str = "📁"
    item_type_file_symbol: str = "📄"
    item_type_symbolic_link_symbol: str = "🔗"
    item_type_unknown_symbol: str = "❓"

    def value_style(self) -> Style:
        """The style used to highlight values such as sizes and names."""
        style = Style()
        if self.value_fg_color is not None:
            style = style.fg(self.value_fg_color)
        if self.value_style_reversed:
            style = style.add_modifier(Modifier.REVERSED)
        return style


def low_color_skin() -> Skin:
    """A skin for terminals with 256 colours or fewer."""
    return Skin(
        title_fg_color=Color.WHITE,
        title_bg_color=Color.BLUE,
        version_fg_color=Color.GRAY,
        table_header_bg_color=Color.DARK_GRAY,
        table_header_fg_color=Color.WHITE,
        value_fg_color=None,
        value_style_reversed=True,
        delete_warning_text_fg_color=Color.LIGHT_RED,
        key_help_danger_bg_color=Color.LIGHT_RED,
        key_help_key_fg_color=Color.GRAY,
    )