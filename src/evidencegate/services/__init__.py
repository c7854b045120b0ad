"""Evidence query and audit services."""
