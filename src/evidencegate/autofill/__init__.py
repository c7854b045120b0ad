"""Confidence-gated template auto-fill."""
