"""Custom Exceptions for the OCRSub application."""

class OCRSubError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(OCRSubError):
    """Exception raised for invalid configuration or command-line input."""
    pass

class VideoLoadError(OCRSubError):
    """Exception raised when a video cannot be opened or its duration determined."""
    pass

class FrameExtractionError(OCRSubError):
    """Exception raised when a single frame cannot be decoded."""
    pass

class RecognitionError(OCRSubError):
    """Exception raised for errors during text recognition."""
    pass

class FormattingError(OCRSubError):
    """Exception raised for errors during subtitle formatting."""
    pass

class FileSystemError(OCRSubError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass
