"""Shared test helpers for agentpacks tests."""
