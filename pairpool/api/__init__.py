"""HTTP service for a single pair."""
