"""Error classification and last-request-wins gating."""
