"""
Main CLI Entry Point

감자튀김 품질 분석 파이프라인 CLI 프로그램.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from fry_meter.calibration import DEFAULT_CALIBRATION, CalibrationError, CalibrationLine, calculate_ppm
from fry_meter.config import PipelineConfig
from fry_meter.data.config_manager import ConfigError
from fry_meter.pipeline import AnalysisPipeline, PipelineError
from fry_meter.schemas.analysis import AnalysisResult, PQIStatus
from fry_meter.schemas.analysis_schemas import to_response
from fry_meter.utils.file_io import list_images, write_json
from fry_meter.utils.image_utils import ImageValidationError

ACCEPTED_STATUSES = (PQIStatus.PASS, PQIStatus.MARGINAL)


# 로깅 설정
def setup_logging(debug: bool = False):
    """로깅 설정 (stdout, UTF-8 콘솔)"""
    level = logging.DEBUG if debug else logging.INFO

    # Windows 콘솔 UTF-8 지원
    if sys.platform == "win32" and hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )

    logging.basicConfig(level=level, handlers=[handler], force=True)


def resolve_ppm(args) -> float:
    """
    --calibrate 가 있으면 기준선에서 px/mm 계산, 없으면 --ppm 사용.

    Raises:
        CalibrationError: 기준선 형식/길이 오류
    """
    logger = logging.getLogger(__name__)
    if args.calibrate:
        line, length_mm = CalibrationLine.parse(args.calibrate)
        calibration = calculate_ppm(line, length_mm)
        logger.info(
            f"Calibrated: {calibration.pixel_length:.1f}px = {calibration.reference_length}mm "
            f"→ {calibration.ppm:.3f} px/mm"
        )
        return calibration.ppm
    if args.ppm is None:
        return 1.0
    return args.ppm


def build_pipeline(args) -> AnalysisPipeline:
    config = PipelineConfig.load(Path(args.config) if args.config else None)
    if args.cell_size:
        config = config.with_cell_size(args.cell_size)
    return AnalysisPipeline(config)


def print_summary(image: str, result: AnalysisResult, ppm: float):
    stats = result.pixel_stats
    scores = result.scores

    print("\n" + "=" * 60)
    print("  Fry Quality Analysis Result")
    print("=" * 60)
    print(f"  Image:        {image} ({result.image_width}x{result.image_height}, {ppm:.3f} px/mm)")
    print(f"  PQI:          {result.pqi} ({result.pqi_status.value})")
    print(f"  Agtron:       {stats.agtron_score}  USDA: {result.usda_color_score} - {result.usda_label}")
    print(f"  ΔE2000:       {stats.delta_e_2000:.2f}  Maillard: {stats.maillard_risk.value} ({result.acrylamide_index}%)")
    print(f"  Crunch:       {stats.crunch_score}/100")
    print(f"  Shadow:       {stats.shadow_mask_ratio:.1%} suppressed")

    print("\n  Attribute Scores:")
    print(f"    Process color: {scores.process_color} ({result.process_color_label})")
    print(f"    Hue:           {scores.hue} ({result.hue_label})")
    print(f"    Mottling:      {scores.mottling}")
    print(f"    Defect:        {scores.defect}")

    if result.real_defects:
        print(f"\n  Defects ({result.defect_count}):")
        for d in result.real_defects:
            print(
                f"    {d.defect_type.value:<10} at ({d.x}, {d.y}) {d.width}x{d.height} "
                f"severity={d.severity:.2f} area={d.area_mm2:.1f}mm²"
            )

    print("=" * 60 + "\n")


def cmd_analyze(args) -> int:
    """단일 이미지 분석"""
    logger = logging.getLogger(__name__)

    ppm = resolve_ppm(args)
    pipeline = build_pipeline(args)
    result = pipeline.analyze_file(args.image, ppm)

    print_summary(args.image, result, ppm)

    # JSON 저장 (옵션)
    if args.output:
        response = to_response(result, source=str(args.image))
        write_json(response.model_dump(mode="json"), Path(args.output))
        logger.info(f"Result saved to {args.output}")

    return 0 if result.pqi_status in ACCEPTED_STATUSES else 1


def cmd_batch(args) -> int:
    """배치 분석"""
    logger = logging.getLogger(__name__)

    batch_dir = Path(args.directory)
    if not batch_dir.is_dir():
        logger.error(f"Batch directory not found: {batch_dir}")
        return 1

    image_paths = list_images(batch_dir, recursive=args.recursive)
    if not image_paths:
        logger.error(f"No images found in {batch_dir}")
        return 1

    logger.info(f"Found {len(image_paths)} images in {batch_dir}")

    ppm = resolve_ppm(args)
    pipeline = build_pipeline(args)
    entries = pipeline.analyze_batch(
        image_paths,
        ppm=ppm,
        continue_on_error=not args.stop_on_error,
        parallel=args.parallel,
        max_workers=args.workers,
    )

    output_dir = Path(args.output_dir) if args.output_dir else None
    for entry in entries:
        if entry.ok and output_dir:
            rel = entry.path.relative_to(batch_dir)
            target = output_dir / rel.parent / f"{rel.stem}.json"
            write_json(to_response(entry.result, source=str(entry.path)).model_dump(mode="json"), target)

    succeeded = [e for e in entries if e.ok]
    accepted = sum(1 for e in succeeded if e.result.pqi_status in ACCEPTED_STATUSES)

    print("\n" + "=" * 60)
    print("  Batch Analysis Summary")
    print("=" * 60)
    print(f"  Total images:  {len(image_paths)}")
    print(f"  Analyzed:      {len(succeeded)}")
    print(f"  Accepted:      {accepted}")
    print(f"  Rejected:      {len(succeeded) - accepted}")
    print(f"  Failed:        {len(entries) - len(succeeded)}")
    if succeeded:
        mean_pqi = sum(e.result.pqi for e in succeeded) / len(succeeded)
        print(f"  Mean PQI:      {mean_pqi:.1f}")
    if output_dir:
        print(f"  Results saved: {output_dir}")
    print("=" * 60 + "\n")

    return 0 if accepted == len(entries) else 1


def _add_common_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--ppm", type=float, help=f"Pixels per millimeter (default: 1, areas in px²; "
                        f"uncalibrated screen ~{DEFAULT_CALIBRATION.ppm})")
    parser.add_argument("--calibrate", metavar="X1,Y1,X2,Y2:MM", help="Derive px/mm from a reference line")
    parser.add_argument("--cell-size", type=int, help="Defect grid cell size in pixels (default: 20)")
    parser.add_argument("--config", help="Pipeline config JSON file")


def main(argv: Optional[List[str]] = None) -> int:
    """메인 함수"""
    parser = argparse.ArgumentParser(
        description="French Fry Quality Analysis System", formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # ========== analyze 명령어 (단일 이미지) ==========
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze single image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fry-meter analyze samples/fries_001.png
  fry-meter analyze samples/fries_001.png --calibrate 10,10,106,10:25.4 --output results/fries_001.json
        """,
    )
    analyze_parser.add_argument("image", help="Image file path")
    analyze_parser.add_argument("--output", help="Output JSON file path")
    _add_common_arguments(analyze_parser)

    # ========== batch 명령어 (배치 처리) ==========
    batch_parser = subparsers.add_parser(
        "batch",
        help="Analyze every image in a directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fry-meter batch samples/
  fry-meter batch samples/ --recursive --parallel --workers 8 --output-dir results/
        """,
    )
    batch_parser.add_argument("directory", help="Batch directory path")
    batch_parser.add_argument("--recursive", action="store_true", help="Include sub-directories")
    batch_parser.add_argument("--parallel", action="store_true", help="Analyze images in parallel")
    batch_parser.add_argument("--workers", type=int, default=4, help="Parallel worker count (default: 4)")
    batch_parser.add_argument("--output-dir", help="Directory for per-image JSON results")
    batch_parser.add_argument("--stop-on-error", action="store_true", help="Abort on the first failed image")
    _add_common_arguments(batch_parser)

    args = parser.parse_args(argv)

    setup_logging(args.debug)
    logger = logging.getLogger(__name__)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "analyze":
            return cmd_analyze(args)
        elif args.command == "batch":
            return cmd_batch(args)

    except (CalibrationError, ConfigError) as e:
        logger.error(f"Invalid argument: {e}")
        return 2

    except (PipelineError, ImageValidationError) as e:
        logger.error(f"Pipeline error: {e}")
        return 2

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
