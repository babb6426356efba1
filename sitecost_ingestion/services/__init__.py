"""Ingestion orchestration services."""
