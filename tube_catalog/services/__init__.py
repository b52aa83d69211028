"""Persistence, ingestion and workflow services."""
