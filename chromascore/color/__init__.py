"""Color layer - Pitch-to-color resolution and scale-degree palettes."""

from .resolver import ColorResolver, octave_modifiers, palette_degree
from .palette import (
    Palette,
    PaletteManager,
    PaletteRequest,
    ColorSchemeClient,
    VARIANT_OFFSETS,
)
from .space import hsb_to_rgb, hsl_to_hsb, hsb_to_hex

__all__ = [
    "ColorResolver",
    "octave_modifiers",
    "palette_degree",
    "Palette",
    "PaletteManager",
    "PaletteRequest",
    "ColorSchemeClient",
    "VARIANT_OFFSETS",
    "hsb_to_rgb",
    "hsl_to_hsb",
    "hsb_to_hex",
]
