"""
RegEx-based entity extraction.

Detects syntactic entities (emails, URLs, phone numbers, dates/times) with
compiled patterns. Pattern families run in a fixed order and a match that
intersects a span claimed by an earlier family is discarded, so a single
call never returns overlapping annotations.
"""

import re
from typing import List, Pattern, Tuple

import structlog

from ..models.annotation import Annotation, AnnotationType
from .source import AnnotationSource


logger = structlog.get_logger(__name__)


# Email: simplified RFC 5322
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")

# URL: http(s) and www prefixes
URL_PATTERN = re.compile(
    r"(?:https?://|www\.)[\w\-._~:/?#\[\]@!$&'()*+,;=%]+",
    re.ASCII,
)

# Phone: international and US formats, guarded against longer digit runs
PHONE_PATTERN = re.compile(
    r"(?<!\d)(?:\+\d{1,3}[\s.-]?)?(?:\(?\d{2,4}\)?[\s.-]?)?\d{3,4}[\s.-]?\d{4}(?!\d)",
    re.ASCII,
)

_MONTH = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?"
    r"|Aug(?:ust)?|Sep(?:tember)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)

DATE_TIME_PATTERN = re.compile(
    r"(?:"
    # 12/31/2025, 31-12-25
    r"\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}"
    # March 5, 2025 / Mar 5
    rf"|{_MONTH}\s+\d{{1,2}}(?:,?\s+\d{{4}})?"
    # 5 March 2025
    rf"|\d{{1,2}}\s+{_MONTH}\s+\d{{4}}"
    r"|(?:today|tonight|tomorrow|yesterday)"
    r"|(?:next|last|this)\s+(?:Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)"
    # 12:30 PM, 2:45pm, 14:30
    r"|\d{1,2}:\d{2}(?:\s*[AaPp][Mm])?"
    r")",
    re.IGNORECASE | re.ASCII,
)

# Extraction order: email before URL so "user@www.x.com" is not split
PATTERN_FAMILIES: Tuple[Tuple[Pattern[str], AnnotationType], ...] = (
    (EMAIL_PATTERN, AnnotationType.EMAIL),
    (URL_PATTERN, AnnotationType.URL),
    (PHONE_PATTERN, AnnotationType.PHONE_NUMBER),
    (DATE_TIME_PATTERN, AnnotationType.DATE_TIME),
)


class RegexEntitySource(AnnotationSource):
    """Deterministic pattern matcher for syntactic entities."""

    SOURCE_ID = "regex_entity"

    source_id = SOURCE_ID
    default_priority = 100
    requires_network = False

    def annotate(self, text: str) -> List[Annotation]:
        """
        Extract emails, URLs, phone numbers and dates/times.

        Args:
            text: Message text

        Returns:
            Non-overlapping annotations with confidence 1.0, in family order

        Examples:
            >>> source = RegexEntitySource()
            >>> [a.type.value for a in source.annotate("ping me at 10:30 pm")]
            ['DATE_TIME']
        """
        if not text or text.isspace():
            return []

        annotations: List[Annotation] = []
        claimed: List[Tuple[int, int]] = []

        for pattern, annotation_type in PATTERN_FAMILIES:
            for match in pattern.finditer(text):
                start, end = match.start(), match.end()
                if any(s < end and start < e for s, e in claimed):
                    continue

                annotations.append(
                    Annotation(
                        type=annotation_type,
                        start_index=start,
                        end_index=end,
                        label=annotation_type.value,
                        confidence=1.0,
                        source=self.source_id,
                        priority=self.default_priority,
                        metadata={"matched": match.group(0)},
                    )
                )
                claimed.append((start, end))

        logger.debug(
            "regex_extraction_complete",
            text_length=len(text),
            annotations_count=len(annotations),
        )

        return annotations
