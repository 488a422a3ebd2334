"""
Version constants for the annotation pipeline.

Bump a component version whenever its output for the same input can change.
"""

API_VERSION = "1.0.0"

REGEX_SOURCE_VERSION = "regex-entity-1.0.0"
MERGER_VERSION = "merger-1.0.0"
NER_PROMPT_VERSION = "ner-prompt-1.0.0"


def get_component_versions() -> dict:
    """Return the component versions reported by the health endpoint."""
    return {
        "regex_source": REGEX_SOURCE_VERSION,
        "merger": MERGER_VERSION,
        "ner_prompt": NER_PROMPT_VERSION,
    }
