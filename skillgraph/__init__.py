"""
Skill Graph Engine
==================

Interactive force-directed layout for a user's skills: categorized
clusters, a numpy force simulation, suggested skills from a pluggable
recommendation provider, and drag / hover / select interaction.

Layers:
- contracts      value types, errors, pin states
- core           categorization, layout, simulation, suggestions, interaction
- adapter        recommendation providers (catalog, Gemini)
- frontend       renderer snapshot and interaction request contracts
- observability  audit log
- api            FastAPI server
"""

from .engine import EngineConfig, SkillGraphEngine
from .core import (
    CategorizationEngine, LayoutInitializer, ForceSimulationEngine, Simulation,
    SuggestionGenerator, InteractionController, ManualTickScheduler,
    AsyncioTickScheduler, LoadReport,
)

__version__ = "0.1.0"

__all__ = [
    'EngineConfig', 'SkillGraphEngine',
    'CategorizationEngine', 'LayoutInitializer', 'ForceSimulationEngine', 'Simulation',
    'SuggestionGenerator', 'InteractionController', 'ManualTickScheduler',
    'AsyncioTickScheduler', 'LoadReport',
]
