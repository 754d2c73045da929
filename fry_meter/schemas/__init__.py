"""
Schemas Package

Frozen result dataclasses and Pydantic models for JSON output.
"""

from .analysis import AnalysisResult, AttributeScores, DefectRegion, DefectType, MaillardRisk, PixelStats, PQIStatus
from .analysis_schemas import (
    AnalysisResponse,
    AttributeScoresModel,
    DefectRegionModel,
    PixelStatsModel,
    to_response,
)

__all__ = [
    # Result records
    "AnalysisResult",
    "AttributeScores",
    "DefectRegion",
    "DefectType",
    "MaillardRisk",
    "PixelStats",
    "PQIStatus",
    # Response models
    "AnalysisResponse",
    "AttributeScoresModel",
    "DefectRegionModel",
    "PixelStatsModel",
    "to_response",
]
