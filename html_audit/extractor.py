"""
Extractors: read-only passes over a DocumentTree.

Each extract_* method is independent of the others, idempotent, and
returns freshly built values in document order. None of them modifies
the tree.

Pipeline position: Stage 3 (Loader → Validator → Extractors → Analyzers).
Input:  DocumentTree
Output: Extraction (metadata, headings, navigation, sections, footer,
        images, links, scripts, styles, content)
"""

import json
import re
from typing import Optional
from urllib.parse import urlparse

from .tree import DocumentTree
from .schemas import (
    ContentStats, ExternalStyle, Extraction, Footer, Heading, ImageRef,
    InlineStyle, LinkRef, Metadata, Navigation, NavigationLink, ScriptRef,
    Section, StylesReport,
)
from .analyzer import score_readability
from .logger import get_module_logger

logger = get_module_logger("extractor")

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
SECTION_TAGS = ("section", "article", "main")

# Subtrees that never count as readable page text
NON_CONTENT_TAGS = ("script", "style", "noscript", "template")

JSON_LD_TYPE = "application/ld+json"

# Footer heuristics: English keywords only, so a footer in another language
# reads as having neither. Approximate signals, not facts.
CONTACT_PATTERN = re.compile(r"contact|email|phone|address", re.IGNORECASE)
COPYRIGHT_PATTERN = re.compile(r"copyright|©|\(c\)", re.IGNORECASE)


def _classes(node) -> list[str]:
    return node.get("class", "").split()


def _rel_tokens(value: str) -> list[str]:
    return value.lower().split()


def is_external_href(href: str, current_host: Optional[str] = None) -> bool:
    """
    True when ``href`` is absolute (scheme and host) and points away from
    ``current_host``.

    Without a current host every absolute URL counts as external.
    Relative, fragment, protocol-relative and host-less URLs
    (mailto:, tel:) never do.
    """
    try:
        parsed = urlparse(href.strip())
        hostname = parsed.hostname
    except ValueError:
        # e.g. an unbalanced IPv6 bracket
        return False
    if not parsed.scheme or not hostname:
        return False
    if not current_host:
        return True
    return hostname != current_host.strip().lower()


class Extractor:
    """Extracts structured facets of a document."""

    def __init__(self, current_host: Optional[str] = None):
        """
        Args:
            current_host: Host the document is served from, used to tell
                          internal links from external ones.
        """
        self.current_host = current_host

    def extract(self, tree: DocumentTree, current_host: Optional[str] = None) -> Extraction:
        """Run every extractor over the tree."""
        logger.debug("Starting extraction")

        extraction = Extraction(
            metadata=self.extract_metadata(tree),
            headings=self.extract_headings(tree),
            navigation=self.extract_navigation(tree),
            sections=self.extract_sections(tree),
            footer=self.extract_footer(tree),
            images=self.extract_images(tree),
            links=self.extract_links(tree, current_host),
            scripts=self.extract_scripts(tree),
            styles=self.extract_styles(tree),
            content=self.extract_content(tree),
        )

        logger.debug(
            f"Extracted {len(extraction.headings)} headings, "
            f"{len(extraction.images)} images, {len(extraction.links)} links, "
            f"{len(extraction.scripts)} scripts"
        )
        return extraction

    # --- Metadata ---

    def extract_metadata(self, tree: DocumentTree) -> Metadata:
        title = tree.find("title")
        charset = tree.select("charset", tags=("meta",))
        canonical = tree.select(
            "rel", lambda v: "canonical" in _rel_tokens(v), tags=("link",)
        )
        html = tree.find("html")
        structured_data, structured_data_errors = self.extract_structured_data(tree)

        return Metadata(
            title=title.text_content().strip() if title else "",
            description=self._named_meta(tree, "description"),
            keywords=self._named_meta(tree, "keywords"),
            author=self._named_meta(tree, "author"),
            viewport=self._named_meta(tree, "viewport"),
            charset=charset[0].get("charset", "") if charset else "",
            robots=self._named_meta(tree, "robots"),
            canonical=canonical[0].get("href", "") if canonical else "",
            language=html.get("lang", "").strip() if html else "",
            open_graph=self.extract_open_graph(tree),
            twitter=self.extract_twitter_meta(tree),
            structured_data=structured_data,
            structured_data_errors=structured_data_errors,
        )

    def _named_meta(self, tree: DocumentTree, name: str) -> str:
        """content of the first <meta name=...>, or ''."""
        matches = tree.select("name", lambda v: v.strip().lower() == name, tags=("meta",))
        return matches[0].get("content", "") if matches else ""

    def extract_open_graph(self, tree: DocumentTree) -> dict[str, str]:
        return self._prefixed_meta(tree, "property", "og:")

    def extract_twitter_meta(self, tree: DocumentTree) -> dict[str, str]:
        return self._prefixed_meta(tree, "name", "twitter:")

    def _prefixed_meta(self, tree: DocumentTree, attr: str, prefix: str) -> dict[str, str]:
        """Map <meta attr="prefix:key" content=...> to {key: content}, skipping empty content."""
        values = {}
        for node in tree.select(attr, lambda v: v.startswith(prefix), tags=("meta",)):
            content = node.get("content", "")
            if content:
                values[node.get(attr)[len(prefix):]] = content
        return values

    def extract_structured_data(self, tree: DocumentTree) -> tuple[list, int]:
        """
        Parse each JSON-LD script independently.

        Returns:
            Tuple of (parsed payloads, number of blocks that failed to parse)
        """
        payloads = []
        errors = 0
        scripts = tree.select(
            "type", lambda v: v.strip().lower() == JSON_LD_TYPE, tags=("script",)
        )
        for index, script in enumerate(scripts):
            try:
                payloads.append(json.loads(script.text_content()))
            except (ValueError, RecursionError) as e:
                # Nesting deeper than the decoder can recurse counts as malformed
                errors += 1
                logger.warning(f"Invalid JSON-LD block {index}: {e}")
        return payloads, errors

    # --- Structure ---

    def extract_headings(self, tree: DocumentTree) -> list[Heading]:
        return [
            Heading(
                level=int(node.tag[1]),
                text=node.text_content().strip(),
                id=node.get("id"),
                classes=_classes(node),
            )
            for node in tree.find_all(*HEADING_TAGS)
        ]

    def extract_navigation(self, tree: DocumentTree) -> list[Navigation]:
        navigation = []
        for nav in tree.find_all("nav"):
            links = [
                NavigationLink(
                    text=a.text_content().strip(),
                    href=a.get("href", ""),
                    title=a.get("title", ""),
                )
                for a in nav.find_all("a")
            ]
            navigation.append(Navigation(
                id=nav.get("id", ""),
                classes=_classes(nav),
                links=links,
            ))
        return navigation

    def extract_sections(self, tree: DocumentTree) -> list[Section]:
        return [
            Section(
                tag=node.tag,
                id=node.get("id", ""),
                classes=_classes(node),
                content_length=len(node.text_content().strip()),
                has_heading=node.find(*HEADING_TAGS) is not None,
            )
            for node in tree.find_all(*SECTION_TAGS)
        ]

    def extract_footer(self, tree: DocumentTree) -> Footer:
        """All <footer> elements are read as one block."""
        footers = tree.find_all("footer")
        if not footers:
            return Footer(exists=False)

        text = "".join(footer.text_content() for footer in footers)
        return Footer(
            exists=True,
            content_length=len(text.strip()),
            links=sum(len(footer.find_all("a")) for footer in footers),
            has_contact_info=bool(CONTACT_PATTERN.search(text)),
            has_copyright=bool(COPYRIGHT_PATTERN.search(text)),
        )

    # --- Resources ---

    def extract_images(self, tree: DocumentTree) -> list[ImageRef]:
        images = []
        for img in tree.find_all("img"):
            alt = img.get("alt")  # None when absent, which is not decorative
            images.append(ImageRef(
                src=img.get("src", ""),
                alt=alt or "",
                title=img.get("title", ""),
                width=img.get("width", ""),
                height=img.get("height", ""),
                loading=img.get("loading", ""),
                srcset=img.get("srcset", ""),
                sizes=img.get("sizes", ""),
                has_alt=bool(alt and alt.strip()),
                is_decorative=alt == "",
            ))
        return images

    def extract_links(self, tree: DocumentTree, current_host: Optional[str] = None) -> list[LinkRef]:
        """<a> elements with an href attribute."""
        host = current_host or self.current_host
        links = []
        for a in tree.select("href", tags=("a",)):
            href = a.get("href")
            text = a.text_content().strip()
            title = a.get("title", "")
            links.append(LinkRef(
                href=href,
                text=text,
                title=title,
                target=a.get("target", ""),
                rel=a.get("rel", ""),
                is_external=is_external_href(href, host),
                is_empty=not text,
                has_title=bool(title),
            ))
        return links

    def extract_scripts(self, tree: DocumentTree) -> list[ScriptRef]:
        scripts = []
        for script in tree.find_all("script"):
            src = script.get("src", "")
            scripts.append(ScriptRef(
                src=src,
                type=script.get("type") or "text/javascript",
                has_async=script.has_attr("async"),
                has_defer=script.has_attr("defer"),
                is_inline=not src,
                content_length=0 if src else len(script.text_content()),
            ))
        return scripts

    def extract_styles(self, tree: DocumentTree) -> StylesReport:
        external = [
            ExternalStyle(href=link.get("href", ""), media=link.get("media") or "all")
            for link in tree.select(
                "rel", lambda v: "stylesheet" in _rel_tokens(v), tags=("link",)
            )
        ]
        inline = [
            InlineStyle(
                type=style.get("type") or "text/css",
                content_length=len(style.text_content()),
            )
            for style in tree.find_all("style")
        ]
        return StylesReport(
            external=external,
            inline=inline,
            total_external=len(external),
            total_inline=len(inline),
        )

    # --- Text ---

    def extract_content(self, tree: DocumentTree) -> ContentStats:
        body = tree.find("body")
        text = body.text_content(skip=NON_CONTENT_TAGS) if body else ""
        return ContentStats(
            total_length=len(text),
            word_count=len(text.split()),
            paragraphs=len(tree.find_all("p")),
            readability_score=score_readability(text),
        )


def extract(tree: DocumentTree, current_host: Optional[str] = None) -> Extraction:
    """Convenience function to run every extractor over a tree."""
    return Extractor(current_host=current_host).extract(tree)
