"""
Analyzers: pure functions from extractor output to diagnostics.

Nothing here looks at the document tree. Each scorer collects issues
(human-readable strings) and derives its score as

    max(0, 100 - len(issues) * weight)

with one issue per *kind* of problem; counts of affected elements are
embedded in the message rather than producing one issue per element.

Pipeline position: Stage 4 (Loader → Validator → Extractors → Analyzers).
Input:  Extraction (or its individual parts)
Output: Analysis
"""

import math
import re

from .schemas import (
    AccessibilityReport, Analysis, Extraction, Heading, HierarchyReport,
    ImageRef, LinkRef, Metadata, PerformanceReport, ScriptRef, SEOReport,
    StylesReport,
)
from .logger import get_module_logger

logger = get_module_logger("analyzer")

# Score deducted per issue, by dimension
SEO_ISSUE_WEIGHT = 15
ACCESSIBILITY_ISSUE_WEIGHT = 12
PERFORMANCE_ISSUE_WEIGHT = 10

# Readability peaks at this many words per sentence
TARGET_WORDS_PER_SENTENCE = 15

SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


def _round_half_up(value: float) -> int:
    # round() would send 92.5 to 92
    return math.floor(value + 0.5)


def _deduct(issues: list[str], weight: int) -> int:
    return max(0, 100 - len(issues) * weight)


def score_readability(text: str) -> int:
    """
    Score text from 0 to 100 by average sentence length.

    Sentences split on runs of . ! ? (blank fragments dropped), words on
    whitespace. The score is 100 - (avg_words_per_sentence - 15) * 2,
    clamped to [0, 100] and rounded half up. Short averages clamp at 100,
    averages of 65 words or more hit 0.
    """
    sentences = [s for s in SENTENCE_BOUNDARY.split(text) if s.strip()]
    words = text.split()

    if not sentences or not words:
        return 0

    avg_words_per_sentence = len(words) / len(sentences)
    score = 100 - (avg_words_per_sentence - TARGET_WORDS_PER_SENTENCE) * 2
    return _round_half_up(max(0, min(100, score)))


class Analyzer:
    """Derives hierarchy, SEO, accessibility and performance diagnostics."""

    def analyze(self, extraction: Extraction) -> Analysis:
        """Run every analyzer over one Extraction."""
        hierarchy = self.analyze_hierarchy(extraction.headings)
        analysis = Analysis(
            hierarchy=hierarchy,
            seo=self.analyze_seo(extraction.metadata, hierarchy, extraction.images),
            accessibility=self.analyze_accessibility(
                extraction.images, extraction.links, extraction.metadata.language
            ),
            performance=self.analyze_performance(
                extraction.images, extraction.scripts, extraction.styles
            ),
        )
        logger.debug(
            f"Scores: seo={analysis.seo.score} "
            f"accessibility={analysis.accessibility.score} "
            f"performance={analysis.performance.score}"
        )
        return analysis

    def analyze_hierarchy(self, headings: list[Heading]) -> HierarchyReport:
        """
        Check heading order.

        Only forward jumps of more than one level are skips: H2 → H4 is an
        issue, H4 → H2 and H2 → H2 are not.
        """
        issues = []

        h1_count = sum(1 for h in headings if h.level == 1)
        if h1_count == 0:
            issues.append("Missing H1 tag")
        elif h1_count > 1:
            issues.append("Multiple H1 tags found")

        for previous, current in zip(headings, headings[1:]):
            if current.level > previous.level + 1:
                issues.append(
                    f"Heading hierarchy skip: H{previous.level} to H{current.level}"
                )

        return HierarchyReport(
            total_headings=len(headings),
            h1_count=h1_count,
            issues=issues,
            is_valid=not issues,
        )

    def analyze_seo(
        self,
        metadata: Metadata,
        hierarchy: HierarchyReport,
        images: list[ImageRef]
    ) -> SEOReport:
        issues = []

        if not metadata.title:
            issues.append("Missing page title")
        if not metadata.description:
            issues.append("Missing meta description")
        if not hierarchy.is_valid:
            issues.append("Invalid heading hierarchy")

        # Decorative images count here too
        images_without_alt = sum(1 for img in images if not img.has_alt)
        if images_without_alt > 0:
            issues.append(f"{images_without_alt} images without alt text")

        return SEOReport(
            issues=issues,
            score=_deduct(issues, SEO_ISSUE_WEIGHT),
            has_structured_data=bool(metadata.structured_data),
        )

    def analyze_accessibility(
        self,
        images: list[ImageRef],
        links: list[LinkRef],
        language: str
    ) -> AccessibilityReport:
        issues = []

        images_missing_alt = sum(
            1 for img in images if not img.has_alt and not img.is_decorative
        )
        if images_missing_alt > 0:
            issues.append(f"{images_missing_alt} images missing alt text")

        empty_links = sum(1 for link in links if link.is_empty)
        if empty_links > 0:
            issues.append(f"{empty_links} empty links")

        if not language:
            issues.append("Missing language attribute on html element")

        return AccessibilityReport(
            issues=issues,
            score=_deduct(issues, ACCESSIBILITY_ISSUE_WEIGHT),
            level=self.accessibility_level(len(issues)),
        )

    @staticmethod
    def accessibility_level(issue_count: int) -> str:
        """Coarse conformance label, not a WCAG audit."""
        if issue_count == 0:
            return "AA"
        if issue_count <= 2:
            return "A"
        return "Below standards"

    def analyze_performance(
        self,
        images: list[ImageRef],
        scripts: list[ScriptRef],
        styles: StylesReport
    ) -> PerformanceReport:
        issues = []

        images_without_dimensions = sum(
            1 for img in images if not img.width or not img.height
        )
        if images_without_dimensions > 0:
            issues.append(f"{images_without_dimensions} images without dimensions")

        # External, and neither async nor deferred
        blocking_scripts = sum(
            1 for s in scripts if s.src and not s.has_async and not s.has_defer
        )
        if blocking_scripts > 0:
            issues.append(f"{blocking_scripts} blocking scripts")

        return PerformanceReport(
            issues=issues,
            score=_deduct(issues, PERFORMANCE_ISSUE_WEIGHT),
            total_resources=len(images) + len(scripts) + styles.total_external,
        )


def analyze(extraction: Extraction) -> Analysis:
    """Convenience function to analyze an Extraction."""
    return Analyzer().analyze(extraction)
