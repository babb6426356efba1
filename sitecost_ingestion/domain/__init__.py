"""Ingestion domain types. ZERO I/O."""
