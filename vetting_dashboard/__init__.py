"""
Core package for the vetting operations dashboard.

Submodules provide sample data generation, loading, enrichment, filtering,
risk scoring and user interface rendering helpers that are orchestrated by
the top-level `app.py`.
"""
