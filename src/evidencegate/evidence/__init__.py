"""Evidence schemas, precision tiers and canonicalization."""
