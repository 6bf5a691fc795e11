"""Helpers to pretty-print benchmark results."""

from __future__ import annotations

from .evaluator import BenchmarkReport, CategoryStats


def _percent(value: float) -> str:
    if value != value:
        return "n/a"
    return f"{value * 100:.2f}%"


def format_category(stats: CategoryStats) -> str:
    lines = [stats.category.value.upper()]
    lines.append(f"  Samples: {stats.samples}")
    lines.append(f"  Character Accuracy: {_percent(stats.avg_character_accuracy)}")
    lines.append(f"  Word Accuracy: {_percent(stats.avg_word_accuracy)}")
    return "\n".join(lines)


def format_report(report: BenchmarkReport) -> str:
    lines = ["", "=== MaxOCR Thai Benchmark Report ===", ""]
    lines.append("Category Statistics:")
    lines.append("-" * 60)

    for stats in report.category_stats:
        lines.append("")
        lines.append(format_category(stats))

    lines.append("")
    lines.append("=" * 60)
    lines.append(f"OVERALL ({len(report.results)} samples)")
    lines.append(f"  Character Accuracy: {_percent(report.overall_character_accuracy)}")
    lines.append(f"  Word Accuracy: {_percent(report.overall_word_accuracy)}")
    if report.skipped:
        lines.append(f"  Skipped (no image): {len(report.skipped)}")
    if report.failed:
        lines.append(f"  Failed: {len(report.failed)}")
    lines.append("=" * 60)
    return "\n".join(lines)


def as_markdown_table(report: BenchmarkReport) -> str:
    """Return a markdown table with one row per category plus the overall row."""

    if not report.results:
        return "No samples evaluated"

    rows = [
        "Category | Samples | Character accuracy | Word accuracy",
        "--- | --- | --- | ---",
    ]
    for stats in report.category_stats:
        rows.append(
            f"{stats.category.value} | {stats.samples} | "
            f"{_percent(stats.avg_character_accuracy)} | {_percent(stats.avg_word_accuracy)}"
        )
    rows.append(
        f"overall | {len(report.results)} | "
        f"{_percent(report.overall_character_accuracy)} | {_percent(report.overall_word_accuracy)}"
    )
    return "\n".join(rows)
