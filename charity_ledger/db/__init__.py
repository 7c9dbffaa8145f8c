"""Database Layer — declarative base and shared column types."""
