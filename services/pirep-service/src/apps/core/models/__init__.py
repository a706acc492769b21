# services/pirep-service/src/apps/core/models/__init__.py
"""
PIREP Service Models

Database models for pilot reports including:
- PIREPs and their append-only audit events
- Multipliers applied to credited flight time
- Ranks, fleet aircraft and rank aircraft allow-lists
"""

from .pirep import Pirep
from .pirep_event import PirepEvent, AppendOnlyError
from .multiplier import Multiplier
from .rank import Aircraft, Rank, RankAircraft

__all__ = [
    # Core PIREP Models
    'Pirep',
    'PirepEvent',
    'AppendOnlyError',

    # Reference Data
    'Multiplier',
    'Aircraft',
    'Rank',
    'RankAircraft',
]
