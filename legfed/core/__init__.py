"""
LegFed Core Package

This package contains configuration, the error hierarchy and the
organism repository shared by every converter.

Modules:
- settings: pydantic-settings configuration loaded from the environment / .env
- exceptions: Error types raised by converters and processors
- organisms: Taxon / genus / species / gensp lookups
"""
