"""
Scoring API Models
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class MarkerSample(BaseModel):
    """One blood sample. Every marker must be present; null marks a missing value."""
    RETP: Optional[float] = Field(..., description="Reticulocyte percentage [%]")
    HGB: Optional[float] = Field(..., description="Haemoglobin [g/dL]")
    HCT: Optional[float] = Field(..., description="Haematocrit [%]")
    RBC: Optional[float] = Field(..., description="Red blood cell count [10^6/uL]")
    MCV: Optional[float] = Field(..., description="Mean corpuscular volume [fL]")
    MCH: Optional[float] = Field(..., description="Mean corpuscular haemoglobin [pg]")
    MCHC: Optional[float] = Field(..., description="Mean corpuscular haemoglobin concentration [g/dL]")


class ABPSRequest(BaseModel):
    """Request for ABPS computation."""
    samples: List[MarkerSample] = Field(..., min_length=1)


class SampleResult(BaseModel):
    """ABPS result for one sample; scores are null when undefined."""
    abps: Optional[float]
    bayes_score: Optional[float]
    svm_score: Optional[float]
    interpretation: str
    clipped_markers: List[str] = []
    bins: Dict[str, Optional[int]] = {}


class ABPSResponse(BaseModel):
    """Response from ABPS computation."""
    parameters_version: str
    results: List[SampleResult]
    warnings: List[str] = []


class OffScoreRequest(BaseModel):
    """Request for OFF-score computation (HGB in g/L)."""
    hgb: List[float] = Field(..., min_length=1, description="Haemoglobin [g/L]")
    retp: List[float] = Field(..., min_length=1, description="Reticulocyte percentage [%]")


class OffScoreResponse(BaseModel):
    """Response from OFF-score computation."""
    scores: List[Optional[float]]
    warnings: List[str] = []


class MarkerDescription(BaseModel):
    name: str
    unit: str
    description: str


class MarkerListResponse(BaseModel):
    """Canonical marker order for positional input."""
    markers: List[MarkerDescription]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    parameters_loaded: bool
    parameters_version: Optional[str] = None
