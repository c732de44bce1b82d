"""
Haematological Marker Catalogue

The seven markers used by the ABPS, in the canonical order that positional
input must follow.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class Marker(str, Enum):
    """Haematological markers required by the ABPS."""
    RETP = "RETP"
    HGB = "HGB"
    HCT = "HCT"
    RBC = "RBC"
    MCV = "MCV"
    MCH = "MCH"
    MCHC = "MCHC"


# Positional (unnamed) input is interpreted in exactly this order.
MARKERS: Tuple[str, ...] = tuple(m.value for m in Marker)
N_MARKERS = len(MARKERS)


@dataclass(frozen=True)
class MarkerInfo:
    """Reference information for one marker."""
    marker: Marker
    unit: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.marker.value,
            "unit": self.unit,
            "description": self.description,
        }


MARKER_INFO: Dict[Marker, MarkerInfo] = {
    Marker.RETP: MarkerInfo(Marker.RETP, "%", "Reticulocyte percentage"),
    Marker.HGB: MarkerInfo(Marker.HGB, "g/dL", "Haemoglobin"),
    Marker.HCT: MarkerInfo(Marker.HCT, "%", "Haematocrit"),
    Marker.RBC: MarkerInfo(Marker.RBC, "10^6/uL", "Red blood cell count"),
    Marker.MCV: MarkerInfo(Marker.MCV, "fL", "Mean corpuscular volume"),
    Marker.MCH: MarkerInfo(Marker.MCH, "pg", "Mean corpuscular haemoglobin"),
    Marker.MCHC: MarkerInfo(Marker.MCHC, "g/dL", "Mean corpuscular haemoglobin concentration"),
}
