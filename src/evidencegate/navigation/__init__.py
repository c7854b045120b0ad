"""Interactive evidence viewer state."""
