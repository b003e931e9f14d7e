"""Maps named query patterns to result-size parameters."""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .constants import LoadTestConstants
from .exceptions import UnknownPatternError


# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryPattern:
    """A named policy for choosing the result size of each call."""
    key: str
    name: str
    description: str
    sizes: Tuple[int, ...]

    def size_for(self, index: int) -> int:
        """Return the size for a zero-based call index, cycling through `sizes`."""
        return self.sizes[index % len(self.sizes)]


def default_patterns() -> List[QueryPattern]:
    """Build the built-in pattern registry."""
    sizes = LoadTestConstants.PATTERN_SIZES
    return [
        QueryPattern("small", "Small Queries (1 row)",
                     "Tests high query volume with minimal data transfer", (sizes["small"],)),
        QueryPattern("medium", "Medium Queries (10 rows)",
                     "Simulates typical application usage", (sizes["medium"],)),
        QueryPattern("large", "Large Queries (50 rows)",
                     "Tests bandwidth and processing of large result sets", (sizes["large"],)),
        QueryPattern("xlarge", "Extra Large Queries (100 rows)",
                     "Stresses serialization of big result sets", (sizes["xlarge"],)),
        QueryPattern("xxlarge", "XX-Large Queries (250 rows)",
                     "Stresses serialization of big result sets", (sizes["xxlarge"],)),
        QueryPattern("huge", "Huge Queries (500 rows)",
                     "Approaches per-query read limits", (sizes["huge"],)),
        QueryPattern("massive", "Massive Queries (1000 rows)",
                     "Maximum result size per query", (sizes["massive"],)),
        QueryPattern(LoadTestConstants.MIXED_PATTERN, "Mixed Pattern",
                     "Simulates realistic mixed query patterns", tuple(LoadTestConstants.MIXED_SIZES)),
    ]


def fixed_size_pattern(size: int) -> QueryPattern:
    """Build an ad-hoc pattern that requests the same result size on every call."""
    if size < 1:
        raise ValueError(f"size must be >= 1, got {size}")
    return QueryPattern(LoadTestConstants.CUSTOM_PATTERN, f"Custom Queries ({size} rows)",
                        "Fixed result size chosen on the command line", (size,))


class QueryPatternResolver:
    """Resolves a pattern name and call index to a result-size parameter."""

    def __init__(self, patterns: Optional[Iterable[QueryPattern]] = None):
        self._patterns: Dict[str, QueryPattern] = {}
        for pattern in (patterns if patterns is not None else default_patterns()):
            self.register(pattern)

    def register(self, pattern: QueryPattern) -> None:
        """Add a pattern, replacing any registered under the same key."""
        if not pattern.sizes:
            raise ValueError(f"Pattern {pattern.key!r} has no sizes")
        self._patterns[pattern.key] = pattern

    @property
    def names(self) -> List[str]:
        return list(self._patterns)

    def get(self, pattern: str) -> QueryPattern:
        """
        Look up a pattern by name.

        Raises:
            UnknownPatternError: If the pattern is not registered.
        """
        try:
            return self._patterns[pattern]
        except KeyError:
            logger.error(f"Unknown query pattern requested: {pattern}")
            raise UnknownPatternError(pattern, self._patterns) from None

    def resolve(self, pattern: str, index: int) -> int:
        """
        Return the result size for a zero-based call index.

        Fixed patterns always return their single size; the mixed pattern
        cycles with `index mod len(sizes)`.
        """
        return self.get(pattern).size_for(index)
