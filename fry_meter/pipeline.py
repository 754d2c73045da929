"""
Analysis Pipeline Module

RGBA 이미지 → AnalysisResult 엔드투엔드 분석 파이프라인.

IlluminationCorrector → PixelStatisticsAnalyzer → DefectDetector → TextureAnalyzer
→ color_evaluator → pqi_scorer → HeatmapGenerator

각 단계는 불변 스냅샷(ImagePlanes, GlobalStatistics, DetectionResult)을 다음 단계로 넘기며,
파이프라인은 호출 간 상태를 보관하지 않는다.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

from fry_meter.config import PipelineConfig
from fry_meter.core import color_evaluator, pqi_scorer
from fry_meter.core.defect_detector import DefectDetector
from fry_meter.core.heatmap import HeatmapGenerator
from fry_meter.core.illumination_corrector import IlluminationCorrector
from fry_meter.core.pixel_statistics import PixelStatisticsAnalyzer
from fry_meter.core.planes import ImagePlanes
from fry_meter.core.texture_analyzer import TextureAnalyzer
from fry_meter.schemas.analysis import AnalysisResult, AttributeScores, PixelStats
from fry_meter.utils.file_io import FileIO
from fry_meter.utils.image_utils import ImageValidationError

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """파이프라인 실행 중 발생하는 예외"""

    pass


@dataclass(frozen=True)
class BatchEntry:
    """배치 처리 결과 항목 (입력 순서 유지)"""

    path: Path
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


class AnalysisPipeline:
    """
    감자튀김 품질 분석 파이프라인.

    Example:
        >>> pipeline = AnalysisPipeline()
        >>> result = pipeline.analyze(image_rgba, ppm=3.78)
        >>> result.pqi, result.pqi_status
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

        self.corrector = IlluminationCorrector(self.config.corrector)
        self.statistics = PixelStatisticsAnalyzer(self.config.statistics, self.config.shadow)
        self.detector = DefectDetector(self.config.detector)
        self.texture = TextureAnalyzer(self.config.texture)
        self.heatmaps = HeatmapGenerator(self.config.heatmap, self.config.shadow)
        self.file_io = FileIO()

        logger.info(f"AnalysisPipeline initialized (cell_size={self.config.cell_size})")

    def analyze(self, image_rgba: np.ndarray, ppm: float = 1.0) -> AnalysisResult:
        """
        단일 이미지 분석.

        Args:
            image_rgba: RGBA uint8 이미지 (H × W × 4), 변경되지 않음
            ppm: pixels per millimeter (결함 면적 mm² 환산, 기본 1 = px²)

        Returns:
            AnalysisResult

        Raises:
            ImageValidationError: 입력이 H × W × 4 uint8 배열이 아닌 경우
            PipelineError: 분석 중 예기치 못한 오류
        """
        start_time = time.perf_counter()
        try:
            # 1. 화이트밸런스 (원본은 텍스처 추정용으로 보존)
            logger.debug("Step 1: White balance")
            correction = self.corrector.correct(image_rgba)
            planes = ImagePlanes.from_rgba(correction.corrected_image)

            # 2. 전역 통계 + 그림자 억제
            logger.debug("Step 2: Global statistics")
            stats = self.statistics.analyze(planes)

            # 3. 결함 검출 + 1/3 규칙
            logger.debug("Step 3: Defect detection")
            detection = self.detector.detect(planes, stats, ppm)
            defects = detection.defects

            # 4. 텍스처 (보정 전 원본)
            logger.debug("Step 4: Texture")
            crunch = self.texture.crunch_score(correction.original_image)

            # 5. 속성 점수
            logger.debug("Step 5: Attribute scores")
            delta_e = color_evaluator.delta_e_to_target(stats.mean_r, stats.mean_g, stats.mean_b)
            risk, acrylamide_index = color_evaluator.maillard_risk(delta_e)
            agtron = color_evaluator.estimate_agtron(stats.mean_r, stats.mean_g, stats.mean_b)
            usda = color_evaluator.usda_score(agtron)
            process_color = color_evaluator.process_color_score(usda)
            hue = color_evaluator.hue_score(stats.mean_h, stats.mean_s)
            scores = AttributeScores(
                process_color=process_color.score,
                hue=hue.score,
                mottling=color_evaluator.mottling_score(defects),
                defect=color_evaluator.defect_score(defects, stats.burnt_ratio),
            )

            # 6. 퍼지 PQI
            logger.debug("Step 6: Fuzzy PQI")
            pqi = pqi_scorer.score_pqi(scores)

            # 7. 진단 출력
            logger.debug("Step 7: Diagnostics")
            hue_histogram = self.heatmaps.hue_histogram(planes)
            heatmap = self.heatmaps.burn_heatmap(planes, stats.baseline)
            explainability = self.heatmaps.explainability_map(defects, planes.width, planes.height)

            result = AnalysisResult(
                pixel_stats=PixelStats(
                    mean_r=stats.mean_r,
                    mean_g=stats.mean_g,
                    mean_b=stats.mean_b,
                    mean_h=stats.mean_h,
                    mean_s=stats.mean_s,
                    mean_v=stats.mean_v,
                    median_hue=stats.median_hue,
                    dark_pixel_ratio=stats.dark_ratio,
                    burnt_pixel_ratio=stats.burnt_ratio,
                    light_pixel_ratio=stats.light_ratio,
                    total_pixels=stats.valid_pixels,
                    shadow_pixels=stats.shadow_pixels,
                    agtron_score=agtron,
                    white_balance_gain=tuple(float(g) for g in correction.gains),
                    shadow_mask_ratio=stats.shadow_mask_ratio,
                    crunch_score=crunch,
                    maillard_risk=risk,
                    delta_e_2000=float(delta_e),
                    fuzzy_confidence=pqi_scorer.fuzzy_confidence(scores),
                ),
                usda_color_score=usda,
                usda_label=color_evaluator.usda_label(usda),
                scores=scores,
                process_color_label=process_color.label,
                hue_label=hue.label,
                overall_appearance_score=max(scores.as_list()),
                pqi=pqi,
                pqi_status=pqi_scorer.pqi_status(pqi),
                defects=defects,
                defect_count=sum(1 for d in defects if not d.is_artifact),
                acrylamide_index=acrylamide_index,
                image_width=planes.width,
                image_height=planes.height,
                cell_size=self.config.cell_size,
                hue_histogram=hue_histogram,
                heatmap=heatmap,
                explainability_map=explainability,
            )

        except ImageValidationError:
            raise

        except Exception as e:
            logger.error(f"Unexpected error in pipeline: {e}", exc_info=True)
            raise PipelineError(f"Pipeline failed: {e}") from e

        processing_time = (time.perf_counter() - start_time) * 1000  # ms
        logger.info(
            f"Analysis complete: {planes.width}x{planes.height}, PQI={result.pqi} ({result.pqi_status.value}), "
            f"scores={scores.as_list()}, defects={result.defect_count}, time={processing_time:.1f}ms"
        )
        return result

    def analyze_file(self, image_path: Union[str, Path], ppm: float = 1.0) -> AnalysisResult:
        """
        이미지 파일 분석.

        Raises:
            PipelineError: 파일을 읽을 수 없거나 분석 실패
        """
        image_path = Path(image_path)
        logger.info(f"Processing image: {image_path}")
        image = self.file_io.load_image(image_path)
        if image is None:
            raise PipelineError(f"Failed to load image: {image_path}")
        return self.analyze(image, ppm)

    def analyze_batch(
        self,
        image_paths: Sequence[Union[str, Path]],
        ppm: float = 1.0,
        continue_on_error: bool = True,
        parallel: bool = False,
        max_workers: int = 4,
    ) -> List[BatchEntry]:
        """
        배치 분석 (옵션으로 병렬 처리 지원).

        이미지 간 공유 상태가 없으므로 병렬 결과는 순차 결과와 동일하다.

        Args:
            image_paths: 입력 이미지 경로 리스트
            ppm: pixels per millimeter
            continue_on_error: 오류 발생 시 계속 진행 여부
            parallel: 병렬 처리 사용 여부 (기본값: False)
            max_workers: 병렬 처리 시 최대 워커 수 (기본값: 4)

        Returns:
            List[BatchEntry]: 입력 순서대로 정렬된 결과 (실패 항목은 error 포함)
        """
        paths = [Path(p) for p in image_paths]
        logger.info(f"Batch processing {len(paths)} images (parallel={parallel})")

        entries: List[Optional[BatchEntry]] = [None] * len(paths)

        if parallel and len(paths) > 1:
            from concurrent.futures import ThreadPoolExecutor, as_completed

            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                future_to_index = {executor.submit(self.analyze_file, path, ppm): i for i, path in enumerate(paths)}

                for done, future in enumerate(as_completed(future_to_index), start=1):
                    i = future_to_index[future]
                    logger.info(f"Processed {done}/{len(paths)}: {paths[i]}")
                    try:
                        entries[i] = BatchEntry(paths[i], result=future.result())
                    except (PipelineError, ImageValidationError) as e:
                        logger.error(f"Error processing {paths[i]}: {e}")
                        entries[i] = BatchEntry(paths[i], error=str(e))
                        if not continue_on_error:
                            for pending in future_to_index:
                                pending.cancel()
                            raise PipelineError(f"Batch processing failed: {e}") from e
        else:
            for i, path in enumerate(paths):
                logger.info(f"Processing {i + 1}/{len(paths)}: {path}")
                try:
                    entries[i] = BatchEntry(path, result=self.analyze_file(path, ppm))
                except (PipelineError, ImageValidationError) as e:
                    logger.error(f"Error processing {path}: {e}")
                    entries[i] = BatchEntry(path, error=str(e))
                    if not continue_on_error:
                        raise

        succeeded = sum(1 for e in entries if e.ok)
        logger.info(f"Batch processing complete: {succeeded} succeeded, {len(paths) - succeeded} failed")
        return entries
