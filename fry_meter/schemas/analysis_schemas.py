"""
Analysis Schemas

Pydantic models for the JSON form of an analysis result (CLI output, batch reports).
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .analysis import AnalysisResult, DefectType, MaillardRisk, PQIStatus


class DefectRegionModel(BaseModel):
    """Defect region (pixel coordinates)"""

    x: int = Field(..., description="Top-left x (pixels)", ge=0)
    y: int = Field(..., description="Top-left y (pixels)", ge=0)
    width: int = Field(..., description="Width (pixels, clipped to image)", ge=0)
    height: int = Field(..., description="Height (pixels, clipped to image)", ge=0)
    type: DefectType = Field(..., description="Defect kind")
    severity: float = Field(..., description="Severity (0-1)", ge=0.0, le=1.0)
    area: int = Field(..., description="Area (pixels²)", ge=0)
    area_mm2: float = Field(..., description="Area (mm², pixels² when uncalibrated)", ge=0.0)
    strip_coverage: float = Field(0.0, description="Defect width share of the row band", ge=0.0)
    position_weight: float = Field(1.0, description="1.0 body, 1.5 tip")
    is_artifact: bool = Field(False, description="True only for shadow regions")

    class Config:
        json_schema_extra = {
            "example": {
                "x": 40,
                "y": 0,
                "width": 20,
                "height": 20,
                "type": "mottled",
                "severity": 0.6,
                "area": 400,
                "area_mm2": 28.0,
                "strip_coverage": 0.4,
                "position_weight": 1.5,
                "is_artifact": False,
            }
        }


class AttributeScoresModel(BaseModel):
    """1-9 attribute scores (5 = equal to target)"""

    process_color: int = Field(..., ge=1, le=9)
    hue: int = Field(..., ge=1, le=9)
    mottling: int = Field(..., ge=1, le=9)
    defect: int = Field(..., ge=1, le=9)


class PixelStatsModel(BaseModel):
    """Global pixel statistics"""

    mean_r: float
    mean_g: float
    mean_b: float
    mean_h: float
    mean_s: float
    mean_v: float
    median_hue: float
    dark_pixel_ratio: float = Field(..., ge=0.0, le=1.0)
    burnt_pixel_ratio: float = Field(..., ge=0.0, le=1.0)
    light_pixel_ratio: float = Field(..., ge=0.0, le=1.0)
    total_pixels: int = Field(..., ge=1)
    shadow_pixels: int = Field(..., ge=0)
    agtron_score: int
    white_balance_gain: List[float] = Field(..., min_length=3, max_length=3)
    shadow_mask_ratio: float = Field(..., ge=0.0, le=1.0)
    crunch_score: int = Field(..., ge=0, le=100)
    maillard_risk: MaillardRisk
    delta_e_2000: float = Field(..., ge=0.0)
    fuzzy_confidence: float = Field(..., ge=0.0, le=1.0)


class AnalysisResponse(BaseModel):
    """Complete analysis result"""

    image_width: int = Field(..., ge=0)
    image_height: int = Field(..., ge=0)
    cell_size: int = Field(..., gt=0)

    pixel_stats: PixelStatsModel
    usda_color_score: float = Field(..., description="USDA color score (0.5 = target)")
    usda_label: str
    scores: AttributeScoresModel
    process_color_label: str
    hue_label: str
    overall_appearance_score: int = Field(..., ge=1, le=9)

    pqi: int = Field(..., description="Product quality index (0-100)", ge=0, le=100)
    pqi_status: PQIStatus
    acrylamide_index: int = Field(..., ge=0, le=100)

    defect_count: int = Field(..., description="Non-artifact defects", ge=0)
    defects: List[DefectRegionModel] = Field(default_factory=list)

    # Diagnostic grids
    hue_histogram: Optional[List[float]] = Field(None, description="36 bins of 10°, percent")
    heatmap: Optional[List[List[float]]] = Field(None, description="Per-cell burn intensity")
    explainability_map: Optional[List[List[float]]] = Field(None, description="Per-cell defect attribution (0-1)")

    source: Optional[str] = Field(None, description="Source image path")

    class Config:
        json_schema_extra = {
            "example": {
                "image_width": 640,
                "image_height": 480,
                "cell_size": 20,
                "pqi": 100,
                "pqi_status": "PASS",
                "scores": {"process_color": 5, "hue": 5, "mottling": 5, "defect": 5},
            }
        }


def _grid(values) -> Optional[List[List[float]]]:
    return [list(row) for row in values] if values else None


def to_response(result: AnalysisResult, source: Optional[str] = None, include_grids: bool = True) -> AnalysisResponse:
    """AnalysisResult → AnalysisResponse (JSON 직렬화용)"""
    stats = result.pixel_stats
    return AnalysisResponse(
        image_width=result.image_width,
        image_height=result.image_height,
        cell_size=result.cell_size,
        pixel_stats=PixelStatsModel(
            mean_r=stats.mean_r,
            mean_g=stats.mean_g,
            mean_b=stats.mean_b,
            mean_h=stats.mean_h,
            mean_s=stats.mean_s,
            mean_v=stats.mean_v,
            median_hue=stats.median_hue,
            dark_pixel_ratio=stats.dark_pixel_ratio,
            burnt_pixel_ratio=stats.burnt_pixel_ratio,
            light_pixel_ratio=stats.light_pixel_ratio,
            total_pixels=stats.total_pixels,
            shadow_pixels=stats.shadow_pixels,
            agtron_score=stats.agtron_score,
            white_balance_gain=list(stats.white_balance_gain),
            shadow_mask_ratio=stats.shadow_mask_ratio,
            crunch_score=stats.crunch_score,
            maillard_risk=stats.maillard_risk,
            delta_e_2000=stats.delta_e_2000,
            fuzzy_confidence=stats.fuzzy_confidence,
        ),
        usda_color_score=result.usda_color_score,
        usda_label=result.usda_label,
        scores=AttributeScoresModel(
            process_color=result.scores.process_color,
            hue=result.scores.hue,
            mottling=result.scores.mottling,
            defect=result.scores.defect,
        ),
        process_color_label=result.process_color_label,
        hue_label=result.hue_label,
        overall_appearance_score=result.overall_appearance_score,
        pqi=result.pqi,
        pqi_status=result.pqi_status,
        acrylamide_index=result.acrylamide_index,
        defect_count=result.defect_count,
        defects=[
            DefectRegionModel(
                x=d.x,
                y=d.y,
                width=d.width,
                height=d.height,
                type=d.defect_type,
                severity=d.severity,
                area=d.area,
                area_mm2=d.area_mm2,
                strip_coverage=d.strip_coverage,
                position_weight=d.position_weight,
                is_artifact=d.is_artifact,
            )
            for d in result.defects
        ],
        hue_histogram=list(result.hue_histogram) if include_grids and result.hue_histogram else None,
        heatmap=_grid(result.heatmap) if include_grids else None,
        explainability_map=_grid(result.explainability_map) if include_grids else None,
        source=source,
    )
