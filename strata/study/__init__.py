"""
Study Module.

Provides the adaptive selection core:
- Mastery ledger (per-item records, per-category stats)
- Priority model and weighted sampler
- Per-mode set builders and the session driver
- Reward bookkeeping (minerals, titles, badges)

StudyService lives in strata.study.study_service; it is not re-exported
here because it depends on the delivery layer.
"""

from strata.study.builders import BuilderConfig, DailySlot, SetBuilder
from strata.study.ledger import LedgerDelta, MasteryLedger
from strata.study.priority import PriorityModel, target_interval
from strata.study.sampler import WeightedSampler
from strata.study.session import SessionDriver, SessionState

__all__ = [
    "BuilderConfig",
    "DailySlot",
    "LedgerDelta",
    "MasteryLedger",
    "PriorityModel",
    "SessionDriver",
    "SessionState",
    "SetBuilder",
    "WeightedSampler",
    "target_interval",
]
