"""Pastebin Lite: ephemeral text sharing with TTL and view limits."""
