"""
Skeletal Sex Estimation - FastAPI Application

Main application entry point with API endpoints for:
- Sex estimation from long-bone CSG measurements
- Sex estimation from vertebral measurements
- Health status
"""
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime
from typing import Optional

from sexest.config import settings
from sexest.core.container import ClassifierContainer
from sexest.core.errors import (
    ClassifierLookupError,
    ConfigError,
    DataError,
    DimensionError,
    EstimationError,
)
from sexest.models.estimation import (
    CSGEstimationRequest,
    EstimationResponse,
    HealthResponse,
    VertebraEstimationRequest,
)
from sexest.services import EstimationService, load_container
from sexest.utils import configure_logging, get_logger

configure_logging(settings.log_level)
logger = get_logger(__name__)

app = FastAPI(
    title="Skeletal Sex Estimation API",
    description="Sex estimation from skeletal morphometrics with pre-trained LDA / RBF-SVM classifiers",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- Service state (one container per process) ----
_service: Optional[EstimationService] = None


def set_container(container: Optional[ClassifierContainer]) -> None:
    """Install (or clear) the container served by the API."""
    global _service
    if container is None:
        _service = None
        return
    _service = EstimationService.from_container(
        container,
        results_file=settings.results_file,
        miss_policy=settings.pdf_miss_policy,
    )


def get_service() -> EstimationService:
    """Dependency: the estimation service, loading the configured container on first use."""
    if _service is None and settings.container_path:
        try:
            set_container(load_container(settings.container_path))
        except (OSError, ConfigError) as e:
            logger.error(f"Failed to load classifier container: {e}")
            raise HTTPException(status_code=500, detail=f"Classifier container unavailable: {e}")
    if _service is None:
        raise HTTPException(status_code=503, detail="No classifier container configured")
    return _service


def _to_http(e: EstimationError) -> HTTPException:
    """Map core failures to HTTP errors."""
    if isinstance(e, ClassifierLookupError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (DimensionError, DataError)):
        return HTTPException(status_code=422, detail=str(e))
    return HTTPException(status_code=500, detail=f"Estimation failed: {e}")


# ---- API Endpoints ----

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        timestamp=datetime.now().isoformat(),
        components={
            "api": "healthy",
            "classifier_container": "loaded" if _service is not None else "not_loaded",
        }
    )


@app.post(f"{settings.api_prefix}/estimate/csg", response_model=EstimationResponse, tags=["Estimation"])
async def estimate_csg(request: CSGEstimationRequest, service: EstimationService = Depends(get_service)):
    """
    Estimate sex from raw long-bone CSG measurements.

    Evaluates each requested classifier slot independently.
    """
    try:
        return service.estimate_csg(
            sample_id=request.sample_id,
            method=request.method or settings.default_method,
            bone=request.bone,
            side=request.side,
            slots=request.slots,
            raw_measurements=request.measurements,
            save=request.save,
        )
    except EstimationError as e:
        logger.warning(f"CSG estimation for '{request.sample_id}' failed: {e}")
        raise _to_http(e)


@app.post(f"{settings.api_prefix}/estimate/vertebra", response_model=EstimationResponse, tags=["Estimation"])
async def estimate_vertebra(request: VertebraEstimationRequest, service: EstimationService = Depends(get_service)):
    """Estimate sex from raw vertebral measurements."""
    try:
        return service.estimate_vertebra(
            sample_id=request.sample_id,
            method=request.method or settings.default_method,
            population=request.population,
            vertebra=request.vertebra,
            measurements=request.measurements,
            save=request.save,
        )
    except EstimationError as e:
        logger.warning(f"Vertebral estimation for '{request.sample_id}' failed: {e}")
        raise _to_http(e)


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
