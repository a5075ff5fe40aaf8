"""Round domain services: generation, hints, guesses, scoring, timers.

Everything here except `scheduler` is plain Python with no Flask imports,
so HTTP routes, socket handlers and the CLI share one implementation of
the game rules.
"""

from .catalog import TargetWordEntry, WordCatalog
from .difficulty import DIFFICULTY_TABLE, RoundConfig, config_for_level
from .machine import MachineSettings, Phase, RoundStateMachine
from .selector import NoPlayableWordsError, RootSelection, RoundGenerationError, select_root

__all__ = [
    'DIFFICULTY_TABLE',
    'MachineSettings',
    'NoPlayableWordsError',
    'Phase',
    'RootSelection',
    'RoundConfig',
    'RoundGenerationError',
    'RoundStateMachine',
    'TargetWordEntry',
    'WordCatalog',
    'config_for_level',
    'select_root',
]
