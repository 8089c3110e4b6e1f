"""Track Extender - upload, extend and stream audio tracks."""

__version__ = "0.1.0"
