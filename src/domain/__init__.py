"""Domain models and types for the treasury valuation pipeline.

This package contains in-memory (Pydantic) models describing the on-chain
registry tree, per-holding values and stored valuation snapshots. They are
independent from persistence models so that the pipeline and its tests can
evolve without DB coupling.
"""

__all__ = ["valuation"]
