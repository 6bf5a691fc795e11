"""Command line interface for running the Thai OCR benchmark."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List

from app.config import Settings, configure_logging, get_settings
from app.schemas.ocr import FigureLanguage, OCRMode
from app.services.ocr import TyphoonOCRService

from .data_loader import limit_samples, load_all_datasets
from .evaluator import BenchmarkReport, BenchmarkRunner, typhoon_ocr_fn
from .reporting import as_markdown_table, format_report

logger = logging.getLogger(__name__)


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be zero or positive, got {number}")
    return number


def parse_args(argv: List[str] | None = None, settings: Settings | None = None) -> argparse.Namespace:
    settings = settings or get_settings()
    parser = argparse.ArgumentParser(description="Run the MaxOCR Thai accuracy benchmark")
    parser.add_argument(
        "--datasets-dir",
        type=Path,
        default=Path(settings.datasets_dir),
        help="Directory holding printed/, handwriting/ and mixed/ samples",
    )
    parser.add_argument(
        "--mode",
        default=OCRMode.V1_5.value,
        choices=[mode.value for mode in OCRMode],
        help="OCR mode to benchmark",
    )
    parser.add_argument(
        "--language",
        default=FigureLanguage.THAI.value,
        choices=[language.value for language in FigureLanguage],
        help="Language for figure descriptions",
    )
    parser.add_argument(
        "--limit",
        type=non_negative_int,
        default=None,
        help="Limit evaluation to the first N samples",
    )
    parser.add_argument(
        "--output-json",
        type=Path,
        default=None,
        help="Write detailed benchmark report to this JSON file",
    )
    parser.add_argument(
        "--markdown",
        action="store_true",
        help="Also print a markdown table summarizing results",
    )
    parser.add_argument(
        "--min-accuracy",
        type=float,
        default=None,
        help="Exit with status 1 if overall character accuracy is below this value (0-1)",
    )
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


async def run_benchmark(args: argparse.Namespace, service: TyphoonOCRService) -> BenchmarkReport:
    samples = load_all_datasets(args.datasets_dir)
    if args.limit is not None:
        samples = limit_samples(samples, args.limit)
    logger.info("Loaded %d samples from %s", len(samples), args.datasets_dir)

    ocr_fn = typhoon_ocr_fn(
        service,
        mode=OCRMode(args.mode),
        language=FigureLanguage(args.language),
    )
    return await BenchmarkRunner(samples, ocr_fn).run()


async def _main(args: argparse.Namespace, settings: Settings) -> int:
    service = TyphoonOCRService(settings)
    try:
        report = await run_benchmark(args, service)
    finally:
        await service.close()

    if args.output_json:
        args.output_json.write_text(report.to_json(), encoding="utf-8")

    if not report.results:
        print("\nNo images found. Add images to run OCR benchmark.")
        print(f"Ground truth samples are available in {args.datasets_dir}/")
        return 0

    print(format_report(report))
    if args.markdown:
        print("\n" + as_markdown_table(report))

    if args.min_accuracy is not None and not report.overall_character_accuracy >= args.min_accuracy:
        logger.error(
            "Overall character accuracy %.4f is below the required %.4f",
            report.overall_character_accuracy, args.min_accuracy
        )
        return 1
    return 0


def main(argv: List[str] | None = None) -> int:
    settings = get_settings()
    args = parse_args(argv, settings)
    configure_logging(args.log_level)

    if not settings.typhoon_api_key:
        logger.error("TYPHOON_API_KEY is not configured")
        return 2

    return asyncio.run(_main(args, settings))


if __name__ == "__main__":
    raise SystemExit(main())
