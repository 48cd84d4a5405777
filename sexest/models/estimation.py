"""
Estimation API Models
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

class CSGEstimationRequest(BaseModel):
    """Raw CSG measurements of one long bone."""
    sample_id: str = Field(default="ANONYMOUS")
    method: Optional[str] = Field(default=None, description="'LDA' or 'RBF'; defaults to the configured method")
    bone: str = Field(..., description="Femur, Tibia or Humerus")
    side: str = Field(..., description="Left or Right")
    slots: List[int] = Field(default=[1], description="Classifier slots to evaluate (1-3)")
    measurements: List[float] = Field(..., description="31 raw CSG values: max distance, then area, perimeter, Ix, Iy, Imin, Imax per level")
    save: bool = Field(default=False, description="Append results to the results log")

class VertebraEstimationRequest(BaseModel):
    """Raw measurements of one vertebra."""
    sample_id: str = Field(default="ANONYMOUS")
    method: Optional[str] = Field(default=None, description="'LDA' or 'RBF'; defaults to the configured method")
    population: str
    vertebra: str
    measurements: List[float]
    save: bool = False

class SlotResultResponse(BaseModel):
    """Result of one classifier slot."""
    slot: int
    classifier_index: int
    sex: str
    probability: float
    score: float
    description: str

class EstimationResponse(BaseModel):
    """Response from a sex estimation."""
    sample_id: str
    skeletal_element: str
    method: str
    results: List[SlotResultResponse]
    saved: bool = False

class HealthResponse(BaseModel):
    """Health status response."""
    status: str
    version: str
    timestamp: str
    components: Dict[str, str]
