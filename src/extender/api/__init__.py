"""HTTP API for Track Extender."""
