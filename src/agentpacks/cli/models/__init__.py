"""Model configuration commands."""
