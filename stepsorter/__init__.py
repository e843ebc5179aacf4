from .algorithms import ALGORITHMS, SORTERS, estimate_total_steps
from .controller import Controller
from .engine import Continuation, RunStatistics, SortEngine, StepEvent, StepKind, StepResult, create_engine
from .errors import InvalidConfiguration, StepSorterError, UnknownAlgorithm
from .scheduler import SchedulerState, StepScheduler

__version__ = "1.0.0"
