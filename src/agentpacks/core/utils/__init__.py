"""Shared utilities (I/O and text helpers)."""
