"""Pipeline orchestration: unit fan-out, fallback chains and the job driver."""

from .analyse import AnalyserOrchestrator
from .collect import CollectionRun, CollectorOrchestrator, assemble
from .driver import JobRecord, JobState, PipelineDriver
from .fallback import Attempt, retry_async, try_in_order
from .synthesis import SynthesisStage, local_synthesis
from .tasks import DetachedTasks
from .units import Tier, UnitDescriptor, UnitOutcome, run_unit, settle

__all__ = [
    "AnalyserOrchestrator",
    "Attempt",
    "CollectionRun",
    "CollectorOrchestrator",
    "DetachedTasks",
    "JobRecord",
    "JobState",
    "PipelineDriver",
    "SynthesisStage",
    "Tier",
    "UnitDescriptor",
    "UnitOutcome",
    "assemble",
    "local_synthesis",
    "retry_async",
    "run_unit",
    "settle",
    "try_in_order",
]
