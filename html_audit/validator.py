"""
Structural validator.

An exhaustive lint pass over a DocumentTree: every violation is collected
and reported together in one ValidationError, nothing short-circuits.

Checks:
- exactly one root <html> element
- a <head> and a <body>
- a <title>
- no id value used twice (first occurrence wins, each later one is reported;
  empty ids are ignored)
"""

from .tree import DocumentTree
from .exceptions import ValidationError
from .logger import get_module_logger

logger = get_module_logger("validator")

REQUIRED_ELEMENTS = ("head", "body", "title")


class Validator:
    """Rejects documents missing mandatory elements or reusing ids."""

    def collect_violations(self, tree: DocumentTree) -> list[str]:
        """Return every violation found, in check order."""
        violations = []
        counts = tree.authored_counts

        if counts["html"] == 0:
            violations.append("Missing <html> element")
        elif counts["html"] > 1:
            violations.append("Multiple <html> elements")

        for tag in REQUIRED_ELEMENTS:
            if counts[tag] == 0:
                violations.append(f"Missing <{tag}> element")

        seen = set()
        for node in tree.select("id"):
            value = node.get("id")
            if not value:
                continue
            if value in seen:
                violations.append(f"Duplicate ID: {value}")
            else:
                seen.add(value)

        return violations

    def validate(self, tree: DocumentTree) -> None:
        """
        Raises:
            ValidationError: listing every violation, comma-joined
        """
        violations = self.collect_violations(tree)
        if violations:
            logger.debug(f"Validation found {len(violations)} violations")
            raise ValidationError(
                f"HTML validation failed: {', '.join(violations)}",
                violations=violations
            )


def validate(tree: DocumentTree) -> None:
    """Convenience function to validate a tree."""
    Validator().validate(tree)
