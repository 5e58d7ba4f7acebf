"""
Pydantic schemas for everything the engine hands back.

Data flow through the pipeline:
  Loader → DocumentTree → Extractors → Extraction
  Extraction → Analyzers → Analysis
  Extraction + Analysis → ParsedDocument (wrapped in ParseResult with the tree)
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from .tree import DocumentTree


# --- Metadata ---

class Metadata(BaseModel):
    """Document-level metadata from <head> (and the root element's lang)."""
    title: str = ""
    description: str = ""
    keywords: str = ""
    author: str = ""
    viewport: str = ""
    charset: str = ""
    robots: str = ""
    canonical: str = ""
    language: str = ""                                          # lang attribute on <html>
    open_graph: dict[str, str] = Field(default_factory=dict)    # "og:" prefix stripped
    twitter: dict[str, str] = Field(default_factory=dict)       # "twitter:" prefix stripped
    structured_data: list[Any] = Field(default_factory=list)    # parsed JSON-LD payloads
    structured_data_errors: int = 0                             # malformed JSON-LD blocks skipped


# --- Structure ---

class Heading(BaseModel):
    level: int = Field(ge=1, le=6)
    text: str
    id: Optional[str] = None
    classes: list[str] = Field(default_factory=list)


class NavigationLink(BaseModel):
    text: str = ""
    href: str = ""
    title: str = ""


class Navigation(BaseModel):
    type: str = "nav"
    id: str = ""
    classes: list[str] = Field(default_factory=list)
    links: list[NavigationLink] = Field(default_factory=list)


class Section(BaseModel):
    tag: str                     # section, article or main
    id: str = ""
    classes: list[str] = Field(default_factory=list)
    content_length: int = 0
    has_heading: bool = False


class Footer(BaseModel):
    exists: bool = False
    content_length: int = 0
    links: int = 0
    # Regex heuristics, English-only and approximate
    has_contact_info: bool = False
    has_copyright: bool = False


class HierarchyReport(BaseModel):
    total_headings: int = 0
    h1_count: int = 0
    issues: list[str] = Field(default_factory=list)
    is_valid: bool = True


class StructureReport(BaseModel):
    headings: list[Heading] = Field(default_factory=list)
    navigation: list[Navigation] = Field(default_factory=list)
    sections: list[Section] = Field(default_factory=list)
    footer: Footer = Field(default_factory=Footer)
    hierarchy: HierarchyReport = Field(default_factory=HierarchyReport)


# --- Resources ---

class ImageRef(BaseModel):
    """
    An <img> element.

    has_alt and is_decorative are mutually exclusive:
      has_alt       = alt present and non-empty after trimming
      is_decorative = alt present and exactly "" (absent alt is NOT decorative)
    width/height stay raw strings, they are never parsed to numbers.
    """
    src: str = ""
    alt: str = ""
    title: str = ""
    width: str = ""
    height: str = ""
    loading: str = ""
    srcset: str = ""
    sizes: str = ""
    has_alt: bool = False
    is_decorative: bool = False


class LinkRef(BaseModel):
    href: str
    text: str = ""
    title: str = ""
    target: str = ""
    rel: str = ""
    is_external: bool = False
    is_empty: bool = False
    has_title: bool = False


class ScriptRef(BaseModel):
    src: str = ""
    type: str = "text/javascript"
    has_async: bool = False
    has_defer: bool = False
    is_inline: bool = True
    content_length: int = 0      # only measured for inline scripts


class ExternalStyle(BaseModel):
    href: str = ""
    media: str = "all"


class InlineStyle(BaseModel):
    type: str = "text/css"
    content_length: int = 0


class StylesReport(BaseModel):
    external: list[ExternalStyle] = Field(default_factory=list)
    inline: list[InlineStyle] = Field(default_factory=list)
    total_external: int = 0
    total_inline: int = 0


class ContentStats(BaseModel):
    total_length: int = 0
    word_count: int = 0
    paragraphs: int = 0
    readability_score: int = 0


# --- Analysis ---

class DimensionReport(BaseModel):
    """Issues found for one dimension and the score derived from them."""
    issues: list[str] = Field(default_factory=list)
    score: int = 100


class SEOReport(DimensionReport):
    has_structured_data: bool = False


class AccessibilityReport(DimensionReport):
    level: str = "AA"


class PerformanceReport(DimensionReport):
    total_resources: int = 0


# --- Stage bundles ---

class Extraction(BaseModel):
    """Output of all extractors for one tree."""
    metadata: Metadata = Field(default_factory=Metadata)
    headings: list[Heading] = Field(default_factory=list)
    navigation: list[Navigation] = Field(default_factory=list)
    sections: list[Section] = Field(default_factory=list)
    footer: Footer = Field(default_factory=Footer)
    images: list[ImageRef] = Field(default_factory=list)
    links: list[LinkRef] = Field(default_factory=list)
    scripts: list[ScriptRef] = Field(default_factory=list)
    styles: StylesReport = Field(default_factory=StylesReport)
    content: ContentStats = Field(default_factory=ContentStats)


class Analysis(BaseModel):
    """Output of all analyzers for one Extraction."""
    hierarchy: HierarchyReport = Field(default_factory=HierarchyReport)
    seo: SEOReport = Field(default_factory=SEOReport)
    accessibility: AccessibilityReport = Field(default_factory=AccessibilityReport)
    performance: PerformanceReport = Field(default_factory=PerformanceReport)


# --- Engine output ---

class ParsedDocument(BaseModel):
    """The report for one document."""
    metadata: Metadata
    structure: StructureReport
    images: list[ImageRef] = Field(default_factory=list)
    links: list[LinkRef] = Field(default_factory=list)
    scripts: list[ScriptRef] = Field(default_factory=list)
    styles: StylesReport = Field(default_factory=StylesReport)
    content: ContentStats = Field(default_factory=ContentStats)
    performance: PerformanceReport = Field(default_factory=PerformanceReport)
    seo: SEOReport = Field(default_factory=SEOReport)
    accessibility: AccessibilityReport = Field(default_factory=AccessibilityReport)
    warnings: list[str] = Field(default_factory=list)   # loader sanitization notes


class ParseResult(BaseModel):
    """Returned by HTMLAnalysisEngine.parse_html()."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool = True
    data: ParsedDocument
    # The tree handle is for callers who want to keep querying; never serialized
    tree: DocumentTree = Field(exclude=True)
    duration: float              # wall-clock milliseconds


class StatsSnapshot(BaseModel):
    """Point-in-time copy of the engine's counters."""
    documents_processed: int = 0
    elements_extracted: int = 0
    errors_found: int = 0
    optimizations_applied: int = 0
