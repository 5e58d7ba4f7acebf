"""
Capability interfaces implemented by the engine.

Each interface names one thing the engine can do. They are independent of
each other; HTMLAnalysisEngine implements all four side by side.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .tree import DocumentTree
from .schemas import Analysis, Extraction


class DocumentLoader(ABC):
    """Builds a DocumentTree from HTML text."""

    @abstractmethod
    def load(self, html: str, preserve_whitespace: Optional[bool] = None) -> DocumentTree:
        """
        Parse HTML into a tree.

        Raises:
            ParseFailure: the tree could not be built
        """
        pass


class DocumentValidator(ABC):
    """Checks a tree for structural problems."""

    @abstractmethod
    def validate(self, tree: DocumentTree) -> None:
        """
        Raises:
            ValidationError: listing every violation found
        """
        pass


class DocumentExtractor(ABC):
    """Produces structured data from a tree without modifying it."""

    @abstractmethod
    def extract(self, tree: DocumentTree, current_host: Optional[str] = None) -> Extraction:
        pass


class DocumentAnalyzer(ABC):
    """Derives diagnostics from extracted data only."""

    @abstractmethod
    def analyze(self, extraction: Extraction) -> Analysis:
        pass
