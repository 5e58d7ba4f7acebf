"""
HTML Audit Engine

Static analysis of an HTML document: structure, metadata, resources and
text, plus SEO, accessibility and performance diagnostics.
- Loader: builds a frozen document tree from raw HTML
- Validator: rejects documents missing mandatory elements or reusing ids
- Extractor: read-only passes producing structured data
- Analyzer: pure scoring over extracted data

Public API surface:
  Engine                — HTMLAnalysisEngine, parse_html
  Pipeline components   — Loader, Validator, Extractor, Analyzer, ParsingStats
  Tree                  — DocumentTree, Node
  Configuration         — EngineConfig, ParseOptions
  Data models           — ParseResult, ParsedDocument, Metadata, Heading, ImageRef, LinkRef, ...
  Error types           — ValidationError (public), ParseFailure (loader-internal)
"""

# --- Engine ---
from .main import HTMLAnalysisEngine, parse_html

# --- Pipeline stage classes ---
from .loader import Loader
from .validator import Validator
from .extractor import Extractor
from .analyzer import Analyzer, score_readability
from .stats import ParsingStats

# --- Tree ---
from .tree import DocumentTree, Node

# --- Configuration ---
from .config import EngineConfig, ParseOptions

# --- Data models ---
from .schemas import (
    AccessibilityReport, ContentStats, Footer, Heading, HierarchyReport,
    ImageRef, LinkRef, Metadata, ParsedDocument, ParseResult,
    PerformanceReport, ScriptRef, SEOReport, StatsSnapshot, StylesReport,
)

# --- Exceptions ---
from .exceptions import HTMLAuditError, ValidationError, ParseFailure

__version__ = "0.1.0"
__all__ = [
    "HTMLAnalysisEngine",
    "parse_html",
    "Loader",
    "Validator",
    "Extractor",
    "Analyzer",
    "score_readability",
    "ParsingStats",
    "DocumentTree",
    "Node",
    "EngineConfig",
    "ParseOptions",
    "AccessibilityReport",
    "ContentStats",
    "Footer",
    "Heading",
    "HierarchyReport",
    "ImageRef",
    "LinkRef",
    "Metadata",
    "ParsedDocument",
    "ParseResult",
    "PerformanceReport",
    "ScriptRef",
    "SEOReport",
    "StatsSnapshot",
    "StylesReport",
    "HTMLAuditError",
    "ValidationError",
    "ParseFailure",
]
