"""Scale-degree palettes - curated local palettes and a remote generator.

A Palette holds one color per scale degree (I-VII) of a key and mode. It is
built either from seven curated, key-agnostic mode palettes rotated to the
key, or from an external color-scheme service seeded from the key's hue.
Every generation call advances a cyclic variant index so repeated requests
for the same key and mode give different seeds.
"""

import warnings
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import requests

from ..core import ColorHSB, Mode, clamp, resolve_enharmonic, tonic_hue
from ..core.theory import MODE_INTERVALS, MODAL_TINTS
from .space import hsl_to_hsb

PALETTE_SIZE = 7

# Key-agnostic palettes, degree I first; (h, s, b)
MODE_PALETTES: Dict[Mode, List[Tuple[int, int, int]]] = {
    Mode.IONIAN: [
        (38, 85, 97), (60, 75, 93), (82, 70, 88), (18, 80, 96),
        (5, 82, 94), (48, 72, 91), (95, 65, 85),
    ],
    Mode.DORIAN: [
        (175, 68, 82), (158, 60, 78), (195, 72, 75), (10, 70, 90),
        (165, 65, 80), (28, 65, 88), (185, 75, 72),
    ],
    Mode.PHRYGIAN: [
        (345, 85, 72), (28, 70, 78), (270, 60, 65), (355, 78, 68),
        (85, 55, 62), (260, 65, 60), (15, 72, 70),
    ],
    Mode.LYDIAN: [
        (52, 78, 99), (70, 65, 96), (220, 55, 95), (35, 82, 98),
        (200, 50, 97), (58, 70, 94), (240, 45, 92),
    ],
    Mode.MIXOLYDIAN: [
        (22, 82, 90), (42, 75, 88), (235, 60, 80), (12, 78, 88),
        (248, 55, 78), (32, 70, 86), (225, 58, 76),
    ],
    Mode.AEOLIAN: [
        (210, 65, 72), (228, 55, 68), (340, 45, 78), (218, 60, 70),
        (200, 58, 75), (350, 40, 72), (232, 50, 65),
    ],
    Mode.LOCRIAN: [
        (280, 35, 52), (68, 45, 58), (295, 30, 48), (78, 40, 55),
        (310, 28, 44), (55, 35, 52), (265, 32, 46),
    ],
}

# Hue rotation per key, flats included
KEY_HUE_ROTATION: Dict[str, int] = {
    "C": 0, "G": 30, "D": 60, "A": 90,
    "E": 150, "B": 195, "F#": 225, "C#": 255,
    "G#": 285, "D#": 310, "A#": 340, "F": 355,
    "Db": 255, "Eb": 310, "Gb": 225, "Ab": 285, "Bb": 340,
}

VARIANT_OFFSETS = [0, 40, 80, 160, 220]

MODE_TO_COLOR_SCHEME: Dict[Mode, str] = {
    Mode.IONIAN: "analogic",
    Mode.LYDIAN: "analogic",
    Mode.MIXOLYDIAN: "analogic-complement",
    Mode.DORIAN: "analogic-complement",
    Mode.AEOLIAN: "complement",
    Mode.PHRYGIAN: "triad",
    Mode.LOCRIAN: "triad",
}


@dataclass(frozen=True)
class Palette:
    """Seven swatches indexed by scale degree, tagged with key and mode."""

    swatches: Tuple[ColorHSB, ...]
    root_key: str
    mode_name: str
    intervals: Tuple[int, ...]
    source: str = "local"

    def __len__(self) -> int:
        return len(self.swatches)

    def __getitem__(self, degree: int) -> ColorHSB:
        return self.swatches[degree]

    @property
    def mode(self) -> Mode:
        try:
            return Mode(self.mode_name)
        except ValueError:
            return Mode.IONIAN


@dataclass(frozen=True)
class PaletteRequest:
    """Seed sent to the remote color-scheme service."""

    seed_hue: int  # degrees [0, 360)
    seed_saturation: int  # percent [40, 88]
    seed_lightness: int  # percent [30, 72]
    scheme: str
    count: int = PALETTE_SIZE


class ColorSchemeClient:
    """HTTP client for a Color API style scheme endpoint."""

    DEFAULT_URL = "https://www.thecolorapi.com/scheme"

    def __init__(self, url: str = DEFAULT_URL, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, request: PaletteRequest) -> List[Tuple[float, float, float]]:
        """
        Ask the service for a color scheme.

        Args:
            request: Seed and scheme

        Returns:
            List of (h, s, l) colors, s and l in percent

        Raises:
            requests.RequestException: Transport failure or non-success status
            ValueError: Malformed or short response
        """
        params = {
            "hsl": f"hsl({request.seed_hue},{request.seed_saturation}%,{request.seed_lightness}%)",
            "mode": request.scheme,
            "count": request.count,
            "format": "json",
        }
        response = self.session.get(self.url, params=params, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()

        try:
            colors = [
                (float(c["hsl"]["h"]), float(c["hsl"]["s"]), float(c["hsl"]["l"]))
                for c in data["colors"]
            ]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed color scheme response: {e}") from e

        if len(colors) < request.count:
            raise ValueError(
                f"Expected {request.count} colors, got {len(colors)}"
            )
        return colors[: request.count]


class PaletteManager:
    """Build and hold the active palette."""

    def __init__(
        self,
        client: Optional[ColorSchemeClient] = None,
    ):
        """
        Initialize PaletteManager.

        Args:
            client: Remote scheme client (created lazily when first needed)
        """
        self.client = client
        self.active: Optional[Palette] = None
        self.variant_index = 0
        self.key_hue_offset = 0.0
        self.status = ""

    @staticmethod
    def build_local(root_key: str, mode_name: str) -> Palette:
        """
        Rotate the curated mode palette to a key.

        Args:
            root_key: Tonic name (sharps or flats)
            mode_name: Mode name; unknown names use the ionian palette

        Returns:
            A 7-swatch Palette
        """
        mode = _lookup_mode(mode_name)
        rotation = KEY_HUE_ROTATION.get(root_key, 0)
        swatches = tuple(
            ColorHSB((h + rotation) % 360, s, b) for h, s, b in MODE_PALETTES[mode]
        )
        return Palette(
            swatches=swatches,
            root_key=root_key,
            mode_name=mode_name,
            intervals=tuple(MODE_INTERVALS[mode]),
        )

    def build_request(self, root_key: str, mode_name: str) -> PaletteRequest:
        """Seed for the current variant of a key and mode."""
        mode = _lookup_mode(mode_name)
        tint_h, tint_s, tint_b = MODAL_TINTS.get(mode, (0, 0, 0))
        offset = VARIANT_OFFSETS[self.variant_index % len(VARIANT_OFFSETS)]
        return PaletteRequest(
            seed_hue=round((tonic_hue(root_key) + tint_h + offset) % 360) % 360,
            seed_saturation=round(clamp(62 + tint_s * 0.4, 40, 88)),
            seed_lightness=round(clamp(52 + tint_b * 0.3, 30, 72)),
            scheme=MODE_TO_COLOR_SCHEME.get(mode, "analogic"),
        )

    def apply_local(self, root_key: str, mode_name: str) -> Palette:
        """Activate the curated palette for a key and mode."""
        palette = self.build_local(root_key, mode_name)
        self._activate(palette)
        self.status = f"Palette: {root_key} {mode_name} (local)"
        return palette

    def request_remote(self, root_key: str, mode_name: str) -> Palette:
        """
        Activate a palette from the remote service, or the local one on failure.

        Args:
            root_key: Tonic name
            mode_name: Mode name

        Returns:
            The newly active Palette
        """
        request = self.build_request(root_key, mode_name)
        self.status = f"Fetching palette (variant {self.variant_index + 1})"

        if self.client is None:
            self.client = ColorSchemeClient()

        try:
            colors = self.client.fetch(request)
        except (requests.RequestException, ValueError) as e:
            warnings.warn(f"Color scheme service unavailable, using local palette: {e}")
            return self.apply_local(root_key, mode_name)

        swatches = []
        for h, s, l in colors:
            s = min(s, 88.0)
            l = min(max(l, 30.0), 75.0)
            swatches.append(ColorHSB(*hsl_to_hsb(h, s / 100.0, l / 100.0)))

        palette = Palette(
            swatches=tuple(swatches),
            root_key=root_key,
            mode_name=mode_name,
            intervals=tuple(MODE_INTERVALS[_lookup_mode(mode_name)]),
            source="remote",
        )
        self._activate(palette)
        self.status = f"Palette: {root_key} {mode_name} (variant {self.variant_index})"
        return palette

    def _activate(self, palette: Palette) -> None:
        self.active = palette
        self.key_hue_offset = -tonic_hue(resolve_enharmonic(palette.root_key))
        self.variant_index += 1

    def clear(self) -> None:
        """Drop the active palette and restart the variant cycle."""
        self.active = None
        self.variant_index = 0
        self.key_hue_offset = 0.0
        self.status = ""


def _lookup_mode(mode_name: str) -> Mode:
    try:
        return Mode((mode_name or "").lower())
    except ValueError:
        return Mode.IONIAN
