"""Page overlay geometry and layer building."""
