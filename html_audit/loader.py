"""
Loader/Normalizer: turns a raw HTML string into a DocumentTree.

- Sanitizes the raw string (fixes byte-level junk parsers choke on)
- Parses permissively with a browser-grade parser, falling back to
  more forgiving ones if it breaks
- Records which mandatory elements were actually written in the markup
- Converts the parse result into frozen tree nodes, collapsing whitespace
  in text unless asked not to

Design principle: malformed markup NEVER fails. Only a catastrophic
parser failure raises, and then as ParseFailure, never as the parsing
library's own exception type.

Pipeline position: Stage 1 (Loader → Validator → Extractors → Analyzers).
Input:  raw HTML string
Output: DocumentTree
"""

import re
from collections import Counter
from typing import Optional

from bs4 import BeautifulSoup, SoupStrainer
from bs4.element import NavigableString, PreformattedString, Tag

from .tree import CENSUS_TAGS, DOCUMENT_TAG, DocumentTree, Node
from .logger import get_module_logger
from .exceptions import ParseFailure

logger = get_module_logger("loader")

# Elements whose text is kept byte-for-byte even when whitespace is collapsed
RAW_TEXT_ELEMENTS = ("script", "style", "pre", "textarea")

# Parser fallback order for HTML input
HTML_PARSERS = ("html5lib", "lxml", "html.parser")

WHITESPACE_RUN = re.compile(r"\s+")


class Loader:
    """
    Rule-based HTML loader.

    Produces a DocumentTree that the rest of the engine queries
    without knowing which parsing library built it.
    """

    # WHATWG encoding spec: browsers silently remap these charsets.
    # https://encoding.spec.whatwg.org/#names-and-labels
    WHATWG_CHARSET_MAP = {
        'iso-8859-1': 'windows-1252',
        'iso8859-1': 'windows-1252',
        'iso88591': 'windows-1252',
        'latin-1': 'windows-1252',
        'latin1': 'windows-1252',
        'us-ascii': 'windows-1252',
        'ascii': 'windows-1252',
        'iso-8859-9': 'windows-1254',
        'iso-8859-11': 'windows-874',
    }

    @staticmethod
    def detect_charset_from_bytes(raw_bytes: bytes) -> str:
        """
        Detect charset from raw HTML bytes by scanning the first 2048 bytes
        for <meta charset=...> or <meta http-equiv="Content-Type" content="...; charset=...">.

        Applies WHATWG browser charset mapping (e.g. iso-8859-1 → windows-1252)
        so that decoded text matches what a browser actually displays.

        Returns the browser-equivalent charset or 'utf-8' as default.
        """
        # Charset declarations must appear within the first 1024 bytes
        head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

        charset = None

        m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
        if m:
            charset = m.group(1).strip().lower()

        # Legacy form: <meta http-equiv="Content-Type" content="...; charset=...">
        if not charset:
            m = re.search(
                r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
                head_str, re.IGNORECASE
            )
            if m:
                charset = m.group(1).strip().lower()

        if not charset:
            return 'utf-8'

        return Loader.WHATWG_CHARSET_MAP.get(charset, charset)

    def __init__(self, preserve_whitespace: bool = False, xml_mode: bool = False):
        """
        Initialize loader.

        Args:
            preserve_whitespace: If True, text nodes keep their whitespace.
                                 If False, runs of whitespace collapse to one space.
            xml_mode: Parse the input as XML instead of HTML.
        """
        self.preserve_whitespace = preserve_whitespace
        self.xml_mode = xml_mode

    def _sanitize_html(self, html: str) -> tuple[str, list[str]]:
        """
        Fix byte-level junk before parsing.

        Returns:
            Tuple of (sanitized HTML, list of warnings)
        """
        warnings = []

        # Lone surrogates cannot be encoded and break the tree builders
        sanitized = html.encode('utf-8', errors='replace').decode('utf-8')

        if '\x00' in sanitized:
            sanitized = sanitized.replace('\x00', '')
            warnings.append("Removed NULL bytes")

        sanitized = sanitized.replace('\r\n', '\n').replace('\r', '\n')

        # Control characters other than tab/newline
        control_chars = ''.join(chr(c) for c in range(32) if c not in (9, 10, 13))
        if any(c in sanitized for c in control_chars):
            sanitized = sanitized.translate(str.maketrans('', '', control_chars))
            warnings.append("Removed control characters")

        logger.debug(f"Sanitization complete. {len(warnings)} fixes applied.")
        return sanitized, warnings

    def load(
        self,
        html: str,
        preserve_whitespace: Optional[bool] = None,
        xml_mode: Optional[bool] = None
    ) -> DocumentTree:
        """
        Parse HTML into a DocumentTree.

        Args:
            html: Raw HTML string
            preserve_whitespace: Per-call override of the loader setting
            xml_mode: Per-call override of the loader setting

        Returns:
            DocumentTree

        Raises:
            ParseFailure: tree construction itself failed
        """
        if not isinstance(html, str):
            raise ParseFailure(
                f"HTML content must be a string, got {type(html).__name__}"
            )

        if preserve_whitespace is None:
            preserve_whitespace = self.preserve_whitespace
        if xml_mode is None:
            xml_mode = self.xml_mode

        sanitized, warnings = self._sanitize_html(html)

        if xml_mode:
            soup, parser = self._parse_xml(sanitized), "xml"
            # Nothing is synthesized in XML mode, the tree is the census
            authored_counts = None
        else:
            soup, parser = self._parse_html(sanitized, warnings)
            authored_counts = self._take_census(sanitized)

        root = self._build_tree(soup, collapse_whitespace=not preserve_whitespace)
        logger.debug(f"Loaded document with {parser}")

        return DocumentTree(
            root,
            authored_counts=authored_counts,
            warnings=warnings,
            parser=parser
        )

    def _parse_html(self, html: str, warnings: list[str]) -> tuple[BeautifulSoup, str]:
        """
        Parser fallback chain: html5lib → lxml → html.parser.

        html5lib implements the full WHATWG algorithm and repairs markup the
        way browsers do. lxml is faster but less faithful; html.parser is
        always available.
        """
        last_error = None
        for parser in HTML_PARSERS:
            try:
                return BeautifulSoup(html, parser), parser
            except Exception as e:
                logger.warning(f"{parser} parsing failed: {e}")
                warnings.append(f"{parser} parsing failed: {e}")
                last_error = e

        raise ParseFailure(
            f"Could not parse HTML: {last_error}",
            parser=HTML_PARSERS[-1],
            details={"error": str(last_error)}
        )

    def _parse_xml(self, html: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(html, "xml")
        except Exception as e:
            raise ParseFailure(
                f"Could not parse XML: {e}",
                parser="xml",
                details={"error": str(e)}
            ) from e

    def _take_census(self, html: str) -> Optional[Counter]:
        """
        Count html/head/body/title tags as written in the markup.

        html.parser builds exactly what it reads and never inserts
        implied elements, so a strained parse gives the authored counts.
        """
        try:
            strained = BeautifulSoup(
                html, "html.parser", parse_only=SoupStrainer(list(CENSUS_TAGS))
            )
        except Exception as e:
            logger.warning(f"Census parse failed, using parsed tree instead: {e}")
            return None
        return Counter(tag.name for tag in strained.find_all(list(CENSUS_TAGS)))

    def _build_tree(self, soup: BeautifulSoup, collapse_whitespace: bool) -> Node:
        """Convert the soup into frozen Nodes, children built before parents."""
        finished = {}
        pending = [(soup, False)]

        while pending:
            tag, expanded = pending.pop()
            if not expanded:
                pending.append((tag, True))
                pending.extend((c, False) for c in tag.children if isinstance(c, Tag))
                continue

            children = []
            for child in tag.children:
                if isinstance(child, Tag):
                    children.append(finished.pop(id(child)))
                elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                    # Comments, doctypes and processing instructions are dropped
                    children.append(Node.text_node(
                        self._normalize_text(str(child), tag.name, collapse_whitespace)
                    ))

            name = DOCUMENT_TAG if tag is soup else tag.name
            finished[id(tag)] = Node(name, self._attributes(tag), children)

        return finished[id(soup)]

    def _normalize_text(self, text: str, parent: str, collapse_whitespace: bool) -> str:
        if not collapse_whitespace or parent in RAW_TEXT_ELEMENTS:
            return text
        return WHITESPACE_RUN.sub(" ", text)

    def _attributes(self, tag: Tag) -> dict[str, str]:
        """Flatten attribute values; bs4 keeps multi-valued ones (class, rel) as lists."""
        attrs = {}
        for name, value in tag.attrs.items():
            if isinstance(value, (list, tuple)):
                value = " ".join(value)
            attrs[str(name)] = str(value)
        return attrs


def load(html: str, preserve_whitespace: bool = False, xml_mode: bool = False) -> DocumentTree:
    """Convenience function to load HTML."""
    return Loader(preserve_whitespace=preserve_whitespace, xml_mode=xml_mode).load(html)
