"""
Main orchestrator for the HTML audit engine.

Runs one document through the pipeline in a single synchronous pass:
Loader → Validator → Extractors → Analyzers, then assembles the report and
updates the engine's counters. No network, no disk, no suspension points.
"""

import time
from typing import Optional, Union

from .tree import DocumentTree
from .loader import Loader
from .validator import Validator
from .extractor import Extractor
from .analyzer import Analyzer
from .stats import ParsingStats
from .config import EngineConfig, ParseOptions
from .interfaces import DocumentAnalyzer, DocumentExtractor, DocumentLoader, DocumentValidator
from .schemas import Analysis, Extraction, ParsedDocument, ParseResult, StatsSnapshot, StructureReport
from .exceptions import ParseFailure, ValidationError
from .logger import get_module_logger, setup_logger

logger = get_module_logger("main")


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class HTMLAnalysisEngine(DocumentLoader, DocumentValidator, DocumentExtractor, DocumentAnalyzer):
    """
    Main orchestrator for HTML analysis.

    Coordinates the pipeline:
    1. Loader: builds the document tree
    2. Validator: rejects structurally broken documents (optional)
    3. Extractor: metadata, structure, resources, text
    4. Analyzer: hierarchy, readability, SEO, accessibility, performance

    Instances can be shared between threads; the counters are the only
    shared mutable state and they are locked.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        log_level: int = None,
        **overrides
    ):
        config = config or EngineConfig()
        if overrides:
            config = EngineConfig(**{**config.model_dump(), **overrides})
        self.config = config

        level = log_level if log_level is not None else config.log_level
        if level is not None:
            setup_logger(level=level)

        self.loader = Loader(
            preserve_whitespace=config.preserve_whitespace,
            xml_mode=config.xml_mode
        )
        self.validator = Validator()
        self.extractor = Extractor(current_host=config.current_host)
        self.analyzer = Analyzer()
        self.stats = ParsingStats()

        logger.info("HTMLAnalysisEngine initialized")

    # --- Capabilities ---

    def load(self, html: str, preserve_whitespace: Optional[bool] = None) -> DocumentTree:
        return self.loader.load(html, preserve_whitespace=preserve_whitespace)

    def validate(self, tree: DocumentTree) -> None:
        self.validator.validate(tree)

    def extract(self, tree: DocumentTree, current_host: Optional[str] = None) -> Extraction:
        extraction = self.extractor.extract(tree, current_host)
        self.stats.add_elements(len(extraction.images))
        if extraction.metadata.structured_data_errors:
            self.stats.add_errors(extraction.metadata.structured_data_errors)
        return extraction

    def analyze(self, extraction: Extraction) -> Analysis:
        return self.analyzer.analyze(extraction)

    # --- Pipeline ---

    def parse_html(
        self,
        html: str,
        options: Union[ParseOptions, dict, None] = None
    ) -> ParseResult:
        """
        Analyze one HTML document.

        Args:
            html: Raw HTML string
            options: Per-call overrides (preserve_whitespace, validate_html,
                     current_host); camelCase keys are accepted in dicts

        Returns:
            ParseResult with the report, the tree handle and the duration

        Raises:
            ValidationError: the document failed validation or could not be parsed
        """
        settings = self._resolve_options(options)
        content_length = len(html) if isinstance(html, str) else 0
        logger.info(
            f"parse_html started: content_length={content_length}, "
            f"validate_html={settings.validate_html}"
        )

        start = time.perf_counter()
        try:
            tree = self.loader.load(html, preserve_whitespace=settings.preserve_whitespace)
            if settings.validate_html:
                self.validate(tree)
            extraction = self.extract(tree, settings.current_host)
            analysis = self.analyze(extraction)

        except ValidationError as e:
            duration = _elapsed_ms(start)
            # One per violation, plus the failed call itself
            self.stats.add_errors(len(e.violations) + 1)
            logger.error(f"parse_html failed after {duration:.1f}ms: {e.message}")
            raise

        except ParseFailure as e:
            duration = _elapsed_ms(start)
            self.stats.add_errors()
            logger.error(f"parse_html failed after {duration:.1f}ms: {e.message}")
            # Callers only ever see ValidationError
            raise ValidationError(
                f"HTML parsing failed: {e.message}",
                details={"parser": e.parser, **e.details}
            ) from e

        except Exception as e:
            duration = _elapsed_ms(start)
            self.stats.add_errors()
            logger.error(
                f"parse_html failed after {duration:.1f}ms: "
                f"{type(e).__name__}: {e}"
            )
            raise

        data = self._build_report(tree, extraction, analysis)
        duration = _elapsed_ms(start)
        self.stats.record_document()

        logger.info(
            f"parse_html completed in {duration:.1f}ms: "
            f"{len(data.images)} images, {len(data.links)} links, "
            f"{len(data.scripts)} scripts, {len(data.structure.headings)} headings"
        )

        return ParseResult(data=data, tree=tree, duration=duration)

    def _resolve_options(self, options: Union[ParseOptions, dict, None]) -> EngineConfig:
        if options is None:
            return self.config
        if isinstance(options, dict):
            options = ParseOptions.model_validate(options)
        return options.resolve(self.config)

    def _build_report(
        self,
        tree: DocumentTree,
        extraction: Extraction,
        analysis: Analysis
    ) -> ParsedDocument:
        return ParsedDocument(
            metadata=extraction.metadata,
            structure=StructureReport(
                headings=extraction.headings,
                navigation=extraction.navigation,
                sections=extraction.sections,
                footer=extraction.footer,
                hierarchy=analysis.hierarchy,
            ),
            images=extraction.images,
            links=extraction.links,
            scripts=extraction.scripts,
            styles=extraction.styles,
            content=extraction.content,
            performance=analysis.performance,
            seo=analysis.seo,
            accessibility=analysis.accessibility,
            warnings=list(tree.warnings),
        )

    # --- Stats ---

    def get_parsing_stats(self) -> StatsSnapshot:
        """Snapshot copy of the counters."""
        return self.stats.snapshot()

    def reset_stats(self) -> None:
        self.stats.reset()


def parse_html(html: str, options: Union[ParseOptions, dict, None] = None) -> ParseResult:
    """Convenience function to analyze HTML with a fresh engine."""
    return HTMLAnalysisEngine().parse_html(html, options)
