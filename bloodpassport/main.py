"""
Blood Passport Scoring - FastAPI Application

API endpoints for:
- OFF-score computation
- Abnormal Blood Profile Score (ABPS) computation
- Reference data (canonical marker order)
"""
from fastapi import Depends, FastAPI, HTTPException
from functools import lru_cache
from datetime import datetime
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from bloodpassport import __version__
from bloodpassport.config import get_settings
from bloodpassport.core.errors import BloodPassportError, ParameterError
from bloodpassport.core.markers import MARKER_INFO
from bloodpassport.models.scoring import (
    ABPSRequest,
    ABPSResponse,
    HealthResponse,
    MarkerListResponse,
    OffScoreRequest,
    OffScoreResponse,
)
from bloodpassport.services.scoring import ScoringService
from bloodpassport.utils import get_logger, setup_logging

logger = get_logger(__name__)
settings = get_settings()

app = FastAPI(
    title="Blood Passport Scoring API",
    description="OFF-score and Abnormal Blood Profile Score for haematological profiles",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)


@lru_cache()
def get_scoring_service() -> ScoringService:
    """Process-wide scoring service (parameters are loaded lazily, once)."""
    return ScoringService()


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(service: ScoringService = Depends(get_scoring_service)):
    """Service status and parameter availability."""
    ready = service.is_ready()
    return HealthResponse(
        status="healthy" if ready else "degraded",
        version=__version__,
        timestamp=datetime.now().isoformat(),
        parameters_loaded=ready,
        parameters_version=service.scorer.version if ready else None,
    )


@app.get(f"{settings.api_prefix}/markers", response_model=MarkerListResponse, tags=["Reference"])
async def list_markers():
    """Markers in the canonical order expected for positional input."""
    return {"markers": [info.to_dict() for info in MARKER_INFO.values()]}


@app.post(f"{settings.api_prefix}/off-score", response_model=OffScoreResponse, tags=["Scoring"])
async def compute_off_score(
    request: OffScoreRequest,
    service: ScoringService = Depends(get_scoring_service),
):
    """OFF-score for paired HGB (g/L) and RETP values."""
    try:
        return service.score_off(request.hgb, request.retp)
    except BloodPassportError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.post(f"{settings.api_prefix}/abps", response_model=ABPSResponse, tags=["Scoring"])
async def compute_abps(
    request: ABPSRequest,
    service: ScoringService = Depends(get_scoring_service),
):
    """ABPS with Bayes/SVM components for each sample, in request order."""
    samples = [sample.model_dump() for sample in request.samples]
    try:
        return service.score_abps(samples)
    except ParameterError as e:
        logger.error(f"ABPS parameters unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except BloodPassportError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.on_event("startup")
async def startup_event():
    """Configure logging on startup."""
    setup_logging(settings.log_level)
    logger.info(f"{settings.app_name} API starting up...")
