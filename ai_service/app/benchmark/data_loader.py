"""Utilities for loading the Thai OCR benchmark datasets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

from .metrics import normalize_text

logger = logging.getLogger(__name__)

# Checked in this order; the first match wins
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp")

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


class Category(str, Enum):
    PRINTED = "printed"
    HANDWRITING = "handwriting"
    MIXED = "mixed"


CATEGORIES = (Category.PRINTED, Category.HANDWRITING, Category.MIXED)


@dataclass(frozen=True)
class Sample:
    """A ground-truth text with its optional paired image.

    The ground truth is read and normalized when the sample is loaded.
    """

    id: str
    category: Category
    ground_truth: str
    image_path: Optional[Path] = None

    @property
    def has_image(self) -> bool:
        return self.image_path is not None

    @property
    def mime_type(self) -> str:
        if self.image_path is None:
            raise ValueError(f"Sample {self.id} has no paired image")
        return MIME_TYPES.get(self.image_path.suffix.lower(), "image/png")

    def load_image_bytes(self) -> bytes:
        if self.image_path is None:
            raise ValueError(f"Sample {self.id} has no paired image")
        return self.image_path.read_bytes()


def find_image(category_dir: Path, sample_id: str) -> Optional[Path]:
    for extension in IMAGE_EXTENSIONS:
        candidate = category_dir / f"{sample_id}{extension}"
        if candidate.is_file():
            return candidate
    return None


def load_category(datasets_dir: Path | str, category: Category | str) -> List[Sample]:
    """Load every ``<id>.txt`` sample of one category, sorted by id.

    A missing category directory yields an empty list so that partial
    datasets can still be benchmarked.
    """

    category = Category(category)
    category_dir = Path(datasets_dir) / category.value
    if not category_dir.is_dir():
        logger.warning("Category directory not found: %s", category_dir)
        return []

    samples: List[Sample] = []
    for text_file in category_dir.glob("*.txt"):
        sample_id = text_file.stem
        samples.append(
            Sample(
                id=sample_id,
                category=category,
                ground_truth=normalize_text(text_file.read_text(encoding="utf-8")),
                image_path=find_image(category_dir, sample_id),
            )
        )

    return sorted(samples, key=lambda sample: sample.id)


def load_all_datasets(datasets_dir: Path | str) -> List[Sample]:
    """Load all categories in fixed order (printed, handwriting, mixed)."""

    samples: List[Sample] = []
    for category in CATEGORIES:
        samples.extend(load_category(datasets_dir, category))
    return samples


def limit_samples(samples: Sequence[Sample], limit: int | None) -> List[Sample]:
    """Return at most ``limit`` samples preserving order."""

    if limit is not None and limit < 0:
        raise ValueError(f"limit must be zero or positive, got {limit}")
    if limit is None or limit >= len(samples):
        return list(samples)
    return list(samples)[:limit]
