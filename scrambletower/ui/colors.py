"""Theme palettes and color utilities for the UI."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Palette:
    BG: str
    HEADER_BG: str
    TEXT_PRIMARY: str
    TEXT_MUTED: str
    TILE: str
    TILE_BORDER_LIGHT: str
    TILE_BORDER_DARK: str
    TILE_TEXT: str
    SELECTED: str
    ACCENT: str
    DANGER: str


LIGHT = Palette(
    BG="#f4f7f7",
    HEADER_BG="#e0f0f0",
    TEXT_PRIMARY="#1a3a3a",
    TEXT_MUTED="#78909c",
    TILE="#669999",
    TILE_BORDER_LIGHT="#77AAAA",
    TILE_BORDER_DARK="#447777",
    TILE_TEXT="#ffffff",
    SELECTED="#ffd600",
    ACCENT="#00838f",
    DANGER="#e53935",
)

DARK = Palette(
    BG="#121212",
    HEADER_BG="#1e2a2a",
    TEXT_PRIMARY="#eceff1",
    TEXT_MUTED="#90a4ae",
    TILE="#3d5c5c",
    TILE_BORDER_LIGHT="#4d7070",
    TILE_BORDER_DARK="#2a4040",
    TILE_TEXT="#ffffff",
    SELECTED="#f5dd4b",
    ACCENT="#4fb3bf",
    DANGER="#ef5350",
)


def palette_for(dark_mode: bool) -> Palette:
    return DARK if dark_mode else LIGHT


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    try:
        a = a.strip()
        b = b.strip()
        if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
            return a
        t = max(0.0, min(1.0, float(t)))
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
        r = int(ar + (br - ar) * t)
        g = int(ag + (bg - ag) * t)
        bl = int(ab + (bb - ab) * t)
        return f"#{r:02X}{g:02X}{bl:02X}"
    except ValueError:
        return a
