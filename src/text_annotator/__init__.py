"""Entity annotation pipeline for short message text."""

from .version import API_VERSION

__version__ = API_VERSION
