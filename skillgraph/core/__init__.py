"""
Core Layout Engine

RESPONSIBILITY: Categorize skills, seed the radial layout, run the force
simulation, merge suggestions and apply user interaction.
ALLOWED INPUTS: Skill records, pointer events, provider candidates
OUTPUTS: A live SkillGraph whose node positions change tick by tick

WHAT THIS LAYER MUST NOT DO:
============================
- Render or paint anything
- Fetch or persist skill records
- Reason about which skills to recommend (providers do that)
- Start threads
"""

from .categorization import (
    CategorizationEngine, CategoryRule, CATEGORY_TABLE, categorize, level_bucket,
)
from .graph import SkillGraph, GraphIntegrityError
from .layout import LayoutConfig, LayoutInitializer
from .loader import GraphLoader, LoadReport, SkippedRecord
from .scheduler import (
    TickScheduler, ScheduledTick, AsyncioTickScheduler, ManualTickScheduler,
)
from .simulation import ForceSimulationEngine, Simulation, SimulationConfig, TickEvent
from .suggestion import SuggestionBatch, SuggestionConfig, SuggestionGenerator
from .interaction import InteractionController

__all__ = [
    'CategorizationEngine', 'CategoryRule', 'CATEGORY_TABLE', 'categorize', 'level_bucket',
    'SkillGraph', 'GraphIntegrityError',
    'LayoutConfig', 'LayoutInitializer',
    'GraphLoader', 'LoadReport', 'SkippedRecord',
    'TickScheduler', 'ScheduledTick', 'AsyncioTickScheduler', 'ManualTickScheduler',
    'ForceSimulationEngine', 'Simulation', 'SimulationConfig', 'TickEvent',
    'SuggestionBatch', 'SuggestionConfig', 'SuggestionGenerator',
    'InteractionController',
]
