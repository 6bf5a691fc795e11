"""Benchmark orchestration logic."""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Sequence

from app.schemas.ocr import FigureLanguage, OCRMode
from app.services.ocr import TyphoonOCRService

from .data_loader import CATEGORIES, Category, Sample
from .metrics import (
    character_accuracy,
    levenshtein_distance,
    normalize_text,
    safe_mean,
    word_accuracy,
)

logger = logging.getLogger(__name__)

OCRFunction = Callable[[Sample], Awaitable[str]]


@dataclass(frozen=True)
class BenchmarkResult:
    sample_id: str
    category: Category
    character_accuracy: float
    word_accuracy: float
    levenshtein_distance: int
    ground_truth_length: int
    ocr_output_length: int


@dataclass(frozen=True)
class CategoryStats:
    category: Category
    samples: int
    avg_character_accuracy: float
    avg_word_accuracy: float


@dataclass
class BenchmarkReport:
    dataset_size: int
    results: List[BenchmarkResult]
    category_stats: List[CategoryStats]
    overall_character_accuracy: float
    overall_word_accuracy: float
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        def _row(item) -> Dict[str, Any]:
            row = asdict(item)
            row["category"] = item.category.value
            return row

        return {
            "dataset_size": self.dataset_size,
            "overall": {
                "samples": len(self.results),
                "character_accuracy": _or_none(self.overall_character_accuracy),
                "word_accuracy": _or_none(self.overall_word_accuracy),
            },
            "categories": [_row(stats) for stats in self.category_stats],
            "results": [_row(result) for result in self.results],
            "skipped": self.skipped,
            "failed": self.failed,
            "metadata": self.metadata,
        }

    def to_json(self, *, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def _or_none(value: float) -> float | None:
    # NaN is not valid JSON
    return None if value != value else value


def score_sample(sample: Sample, ocr_output: str) -> BenchmarkResult:
    """Compare one OCR output against the sample's ground truth."""

    ground_truth = normalize_text(sample.ground_truth)
    output = normalize_text(ocr_output)
    return BenchmarkResult(
        sample_id=sample.id,
        category=sample.category,
        character_accuracy=character_accuracy(ground_truth, output),
        word_accuracy=word_accuracy(ground_truth, output),
        levenshtein_distance=levenshtein_distance(ground_truth, output),
        ground_truth_length=len(ground_truth),
        ocr_output_length=len(output),
    )


def calculate_category_stats(results: Sequence[BenchmarkResult]) -> List[CategoryStats]:
    """Mean accuracies per category, in fixed category order.

    Categories without results are left out.
    """

    grouped: Dict[Category, List[BenchmarkResult]] = {}
    for result in results:
        grouped.setdefault(Category(result.category), []).append(result)

    stats: List[CategoryStats] = []
    for category in CATEGORIES:
        category_results = grouped.get(category)
        if not category_results:
            continue
        stats.append(
            CategoryStats(
                category=category,
                samples=len(category_results),
                avg_character_accuracy=safe_mean(r.character_accuracy for r in category_results),
                avg_word_accuracy=safe_mean(r.word_accuracy for r in category_results),
            )
        )
    return stats


def typhoon_ocr_fn(
    service: TyphoonOCRService,
    *,
    mode: OCRMode = OCRMode.V1_5,
    language: FigureLanguage = FigureLanguage.THAI,
) -> OCRFunction:
    """Build an OCR function that sends a sample's image to Typhoon."""

    async def run_ocr(sample: Sample) -> str:
        image_bytes = await asyncio.to_thread(sample.load_image_bytes)
        response = await service.process_with_retry(
            base64.b64encode(image_bytes).decode("ascii"),
            mode=mode,
            language=language,
            mime_type=sample.mime_type,
        )
        return response.text

    return run_ocr


class BenchmarkRunner:
    """Runs OCR over the samples one at a time and aggregates accuracy."""

    def __init__(self, samples: Sequence[Sample], ocr_fn: OCRFunction) -> None:
        self.samples = list(samples)
        self.ocr_fn = ocr_fn

    async def benchmark_sample(self, sample: Sample) -> BenchmarkResult | None:
        """Score one sample, or return ``None`` if it has no image or OCR fails."""

        if not sample.has_image:
            logger.warning("No image found for sample: %s", sample.id)
            return None

        try:
            ocr_output = await self.ocr_fn(sample)
            return score_sample(sample, ocr_output)
        except Exception:
            logger.exception("Error processing sample %s", sample.id)
            return None

    async def run(self) -> BenchmarkReport:
        results: List[BenchmarkResult] = []
        skipped: List[str] = []
        failed: List[str] = []
        started = time.perf_counter()

        for sample in self.samples:
            if not sample.has_image:
                logger.warning("No image found for sample: %s", sample.id)
                skipped.append(sample.id)
                continue

            logger.info("Processing: %s (%s)", sample.id, sample.category.value)
            result = await self.benchmark_sample(sample)
            if result is None:
                failed.append(sample.id)
            else:
                results.append(result)

        return BenchmarkReport(
            dataset_size=len(self.samples),
            results=results,
            category_stats=calculate_category_stats(results),
            overall_character_accuracy=safe_mean(r.character_accuracy for r in results),
            overall_word_accuracy=safe_mean(r.word_accuracy for r in results),
            skipped=skipped,
            failed=failed,
            metadata={
                "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
                "duration_seconds": round(time.perf_counter() - started, 3),
            },
        )
