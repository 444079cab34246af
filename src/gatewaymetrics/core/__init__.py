"""Framework-free enrichment logic."""
