"""Confidence-gated autofill decisions and evidence overlays."""

__version__ = "0.1.0"
