"""
ABOUTME: Exception hierarchy for the docx surgeon engine
ABOUTME: Structural mismatches and bad options are always fatal to the current pass
"""


class SurgeonError(Exception):
    """Base class for all errors raised by the engine."""


class StructuralMismatchError(SurgeonError, ValueError):
    """
    The markup cannot be transformed without producing corrupt output.

    Raised for merges across incompatible runs, field separators or ends
    without an open begin, unterminated fields, and bookmark erasure ranges
    that would truncate another bookmark.
    """


class ConfigurationError(SurgeonError, ValueError):
    """An option name or value is not recognized. Raised before any markup is touched."""
