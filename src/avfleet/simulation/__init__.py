"""Cohort fleet and cash-flow simulation."""

from .engine import CohortSimulationEngine, SimulationResult, YearRecord, simulate, simulate_profile

__all__ = ["CohortSimulationEngine", "SimulationResult", "YearRecord", "simulate", "simulate_profile"]
