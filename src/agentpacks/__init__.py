"""
agentpacks - compose configuration packs for AI coding assistants

agentpacks resolves a dependency graph of packs (rules, commands, agents,
skills, MCP servers, ignore patterns and model profiles), merges them
deterministically and generates native configuration for each supported tool.
"""

__version__ = "0.4.0"
__all__ = ["__version__"]
