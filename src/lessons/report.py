"""
Markdown reports for migration and validation runs.
"""

from __future__ import annotations

from .orchestrator import BatchMigrationResult
from .validator import BatchValidationResult


def render_validation_report(results: BatchValidationResult) -> str:
    """Markdown summary of a batch validation, critical issues first."""
    lines = [
        "# Migration Validation Report",
        "",
        f"**Total Lessons:** {results.total_lessons}",
        f"**Valid Lessons:** {results.valid_lessons}",
        f"**Invalid Lessons:** {results.invalid_lessons}",
        f"**Lessons with Warnings:** {results.lessons_with_warnings}",
        "",
    ]

    invalid = [r for r in results.results if not r.report.is_valid]
    if invalid:
        lines += ["## Critical Issues", ""]
        for result in invalid:
            lines.append(f"### {result.lesson_title} ({result.lesson_id})")
            lines += [f"- ❌ {error}" for error in result.report.errors]
            lines.append("")

    warned = [r for r in results.results if r.report.has_warnings]
    if warned:
        lines += ["## Warnings", ""]
        for result in warned:
            lines.append(f"### {result.lesson_title} ({result.lesson_id})")
            lines += [f"- ⚠️ {warning}" for warning in result.report.warnings]
            lines.append("")

    return "\n".join(lines)


def render_migration_report(result: BatchMigrationResult) -> str:
    """Markdown summary of a batch migration."""
    stats = result.stats
    lines = [
        "# Lesson Migration Report",
        "",
        f"**Total lessons processed:** {result.total}",
        f"**Successfully migrated:** {len(result.migrated)}",
        f"**Migrated with issues:** {len(result.issues)}",
        f"**Already migrated:** {len(result.already_migrated)}",
        f"**Failed:** {len(result.failed)}",
        f"**Completion:** {stats.completion_percentage:.1f}%",
        "",
        "## Formats",
        "",
        "| Format | Count |",
        "|---|---|",
    ]
    lines += [f"| {name} | {count} |" for name, count in stats.by_format.items()]
    lines.append("")

    if result.issues:
        lines += ["## Migrated with Issues", ""]
        for outcome in result.issues:
            lines.append(f"### {outcome.lesson.get('title')} ({outcome.lesson_id})")
            lines += [f"- ❌ {error}" for error in outcome.report.errors]
            lines += [f"- ⚠️ {warning}" for warning in outcome.report.warnings]
            lines.append("")

    if result.failed:
        lines += ["## Failed Migrations", ""]
        lines += [
            f"{n}. record {failure.index} ({failure.lesson_ref}): {failure.error}"
            for n, failure in enumerate(result.failed, start=1)
        ]
        lines.append("")

    return "\n".join(lines)
