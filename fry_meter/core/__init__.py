"""
Core Algorithm Modules

Analysis stages for french-fry quality inspection:
- IlluminationCorrector: Neutral-patch white balance
- PixelStatisticsAnalyzer: Global statistics with shadow suppression
- DefectDetector: Shadow-aware grid defect classification and one-third rule
- TextureAnalyzer: Crust micro-topography (crunch score)
- color_evaluator: Agtron/USDA, hue, mottling and defect attribute scores
- pqi_scorer: Fuzzy composite quality index
- HeatmapGenerator: Hue histogram, burn heatmap, explainability map
"""

from .defect_detector import DefectDetector
from .heatmap import HeatmapGenerator
from .illumination_corrector import IlluminationCorrector
from .pixel_statistics import PixelStatisticsAnalyzer
from .texture_analyzer import TextureAnalyzer

__all__ = [
    "IlluminationCorrector",
    "PixelStatisticsAnalyzer",
    "DefectDetector",
    "TextureAnalyzer",
    "HeatmapGenerator",
]
