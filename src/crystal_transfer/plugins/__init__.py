"""Pluggable destinations for replicated block traces."""
