"""Upstream trend sources: payload parsers and per-source fetchers."""
