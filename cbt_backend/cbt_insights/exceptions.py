"""
Custom exceptions for the CBT insights engine.
"""


class CBTInsightsError(Exception):
    """Base exception for all CBT insights errors."""
    pass


class CardFormatError(CBTInsightsError):
    """Summary card payload is not a decodable JSON object."""
    pass


class TranscriptTooLargeError(CBTInsightsError):
    """Transcript exceeds the configured message or character limits."""

    def __init__(self, message: str, *, limit: int, actual: int):
        super().__init__(message)
        self.limit = limit
        self.actual = actual
