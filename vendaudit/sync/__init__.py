"""Sync: regenerate vendored files from upstream baselines and recorded patches."""
