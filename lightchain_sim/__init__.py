"""
LightChain Experiment Package
=============================

Experiments measuring adversarial behaviour in the LightChain skip graph
simulator.

Modules:
- config: Shared experiment parameters and reproducibility helpers
- entities: Nodes and transactions as observed by the experiments
- malicious_success: Per-slot malicious success chance of validator acquisition
- acquisition_simulation: Slot-based validator acquisition simulation and CLI
"""

from .config import (
    RANDOM_SEED,
    DEFAULT_SLOTS,
    ExperimentParams,
    get_rng,
)
from .malicious_success import (
    InvalidArgument,
    SlotResult,
    SuccessAggregator,
)

__version__ = "1.0.0"
