"""
Keyword classifier suggesting a category and priority for a complaint.

Matching is plain lowercase substring search, so a keyword such as ``ac``
also matches inside longer words. Results are deterministic.
"""

from typing import Dict, Mapping, Optional, Sequence, Tuple

from campus_complaints.schemas.complaint import CategorySuggestion
from campus_complaints.schemas.enums import ComplaintCategory, ComplaintPriority

__all__ = [
    "CATEGORY_KEYWORDS",
    "HIGH_PRIORITY_KEYWORDS",
    "MEDIUM_PRIORITY_KEYWORDS",
    "ComplaintClassifier",
    "classify_complaint",
]


CATEGORY_KEYWORDS: Dict[ComplaintCategory, Tuple[str, ...]] = {
    ComplaintCategory.WIFI: (
        "wifi", "internet", "network", "connection", "connectivity",
        "online", "bandwidth", "router",
    ),
    ComplaintCategory.LAB: (
        "lab", "system", "computer", "pc", "desktop", "monitor",
        "keyboard", "mouse", "software",
    ),
    ComplaintCategory.HOSTEL: (
        "hostel", "room", "fan", "light", "bed", "mattress", "washroom",
        "bathroom", "mess",
    ),
    ComplaintCategory.ELECTRICAL: (
        "electric", "power", "electricity", "voltage", "switch", "socket",
        "wiring", "blackout",
    ),
    ComplaintCategory.INFRASTRUCTURE: (
        "building", "wall", "ceiling", "floor", "door", "window", "paint",
        "construction",
    ),
    ComplaintCategory.LIBRARY: (
        "library", "book", "reading", "seating", "ac", "silence",
    ),
}

HIGH_PRIORITY_KEYWORDS: Tuple[str, ...] = (
    "urgent", "emergency", "broken", "damage", "safety", "danger", "fire",
    "leak", "complete", "full", "outage", "critical",
)

MEDIUM_PRIORITY_KEYWORDS: Tuple[str, ...] = (
    "issue", "problem", "not working", "malfunction", "need", "repair", "fix",
)

NO_MATCH_CONFIDENCE = 0.4
BASE_CONFIDENCE = 0.6
CONFIDENCE_STEP = 0.1
MAX_CONFIDENCE = 0.95


class ComplaintClassifier:
    """
    Suggests a category, priority and confidence from complaint text.

    The keyword tables default to the campus lists above. Categories are
    scored in enumeration order and a later category must strictly beat the
    current best to win, so ties go to the earlier category.
    """

    def __init__(
        self,
        category_keywords: Optional[Mapping[ComplaintCategory, Sequence[str]]] = None,
        high_priority_keywords: Optional[Sequence[str]] = None,
        medium_priority_keywords: Optional[Sequence[str]] = None,
    ):
        keywords = category_keywords if category_keywords is not None else CATEGORY_KEYWORDS
        self.category_keywords = {
            category: tuple(k.lower() for k in keywords.get(category, ()))
            for category in ComplaintCategory
            if category != ComplaintCategory.OTHERS
        }
        if high_priority_keywords is None:
            high_priority_keywords = HIGH_PRIORITY_KEYWORDS
        if medium_priority_keywords is None:
            medium_priority_keywords = MEDIUM_PRIORITY_KEYWORDS
        self.high_priority_keywords = tuple(k.lower() for k in high_priority_keywords)
        self.medium_priority_keywords = tuple(k.lower() for k in medium_priority_keywords)

    @staticmethod
    def _normalize(title: Optional[str], description: Optional[str]) -> str:
        return f"{title or ''} {description or ''}".lower()

    @staticmethod
    def _count_matches(text: str, keywords: Sequence[str]) -> int:
        return sum(1 for keyword in set(keywords) if keyword and keyword in text)

    def best_category(self, text: str) -> Tuple[ComplaintCategory, int]:
        """Winning category and its match count for already normalized text."""
        best = ComplaintCategory.OTHERS
        best_count = 0
        for category, keywords in self.category_keywords.items():
            count = self._count_matches(text, keywords)
            if count > best_count:
                best, best_count = category, count
        return best, best_count

    def priority_for(self, text: str, match_count: int) -> ComplaintPriority:
        if any(k in text for k in self.high_priority_keywords):
            return ComplaintPriority.HIGH
        if any(k in text for k in self.medium_priority_keywords) or match_count >= 2:
            return ComplaintPriority.MEDIUM
        return ComplaintPriority.LOW

    @staticmethod
    def confidence_for(match_count: int) -> float:
        if match_count == 0:
            return NO_MATCH_CONFIDENCE
        return round(min(MAX_CONFIDENCE, BASE_CONFIDENCE + CONFIDENCE_STEP * match_count), 2)

    def classify(
        self,
        title: Optional[str],
        description: Optional[str],
    ) -> CategorySuggestion:
        text = self._normalize(title, description)
        category, match_count = self.best_category(text)
        return CategorySuggestion(
            category=category,
            priority=self.priority_for(text, match_count),
            confidence=self.confidence_for(match_count),
            match_count=match_count,
        )


_default_classifier = ComplaintClassifier()


def classify_complaint(
    title: Optional[str],
    description: Optional[str],
) -> CategorySuggestion:
    """Classify with the default campus keyword tables."""
    return _default_classifier.classify(title, description)
