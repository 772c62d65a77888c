"""notedigest: digest budgeting and cached AI report generation for notes."""

from notedigest.version import __version__

__all__ = ["__version__"]
