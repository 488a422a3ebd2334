"""
Annotation source interface.

A source turns message text into raw (possibly overlapping) annotations.
Sources are composed by passing an ordered list to the pipeline.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models.annotation import Annotation


class AnnotationSource(ABC):
    """Abstract annotation source."""

    #: Stable id used for cache keys and ``enabled_source_ids`` filtering
    source_id: str = ""
    #: Priority stamped on every annotation this source emits
    default_priority: int = 0
    #: True if producing annotations needs network access
    requires_network: bool = False

    @abstractmethod
    def annotate(self, text: str) -> List[Annotation]:
        """Return raw annotations for ``text``."""

    def close(self) -> None:
        """Release held resources. Default: nothing to release."""
