"""JSON score export - layers, measures and notes in the color wire format."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from ..color import Palette
from ..core import Layer, Measure


class ScoreExporter:
    """Serialize a composition for an external renderer."""

    def __init__(self, bpm: float = 120.0, beats_per_measure: int = 4):
        self.bpm = bpm
        self.beats_per_measure = beats_per_measure

    def to_dict(
        self,
        layers: Iterable[Layer],
        palette: Optional[Palette] = None,
        key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Composition as plain JSON-ready data."""
        return {
            "bpm": self.bpm,
            "beatsPerMeasure": self.beats_per_measure,
            "key": key,
            "palette": self._palette_dict(palette),
            "layers": [self._layer_dict(layer) for layer in layers],
        }

    def export(
        self,
        layers: Iterable[Layer],
        output_path: str,
        palette: Optional[Palette] = None,
        key: Optional[str] = None,
    ) -> None:
        """Write the composition as JSON."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(layers, palette, key), f, indent=2)

    def _layer_dict(self, layer: Layer) -> Dict[str, Any]:
        # Each layer keeps the grid it was sealed on
        return {
            "category": layer.category.value,
            "label": layer.label,
            "bpm": layer.bpm or self.bpm,
            "beatsPerMeasure": layer.beats_per_measure if layer.bpm else self.beats_per_measure,
            "measures": [self._measure_dict(m) for m in layer.measures],
        }

    @staticmethod
    def _measure_dict(measure: Measure) -> Dict[str, Any]:
        return {
            "measureNumber": measure.measure_number,
            "mode": measure.mode.value if measure.mode else None,
            "notes": [n.to_dict() for n in measure.notes],
        }

    @staticmethod
    def _palette_dict(palette: Optional[Palette]) -> Optional[Dict[str, Any]]:
        if palette is None:
            return None
        return {
            "rootKey": palette.root_key,
            "mode": palette.mode_name,
            "intervals": list(palette.intervals),
            "source": palette.source,
            "swatches": [c.to_dict() for c in palette.swatches],
        }
