"""Source file adapters."""
