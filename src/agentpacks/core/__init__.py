"""agentpacks core engine: packs, models, lockfile, targets and diff."""
