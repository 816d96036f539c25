"""
Study Planner backend package.

Todo and folder CRUD over a hosted table store with a local fallback cache,
plus calendar and timeline projections. The FastAPI app lives in
``study_planner.main``.
"""

__version__ = "0.1.0"
