"""Top-level agentpacks commands."""
