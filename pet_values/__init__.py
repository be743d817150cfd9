"""
Pet value import.

This package merges pet values from external sources into one dataset,
keyed by the local catalog of pet images.

Modules:
- config: Paths, fetch settings and defaults
- schemas: Pydantic models for catalog entries, source records and the dataset
- normalizer: Name normalization for cross-source matching
- aggregator: Value coercion and median aggregation
- catalog: Local pet image catalog
- sources: Source adapters and concurrent collection
- reconciler: Catalog/source merge
- writer: Dataset persistence
- pipeline: End-to-end import and CLI
"""

__version__ = "0.1.0"
