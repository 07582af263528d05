"""
LightChain Experiment Configuration
===================================

Central configuration for the malicious success experiment.

The signature threshold is the number of colluding malicious validators a
transaction needs for a malicious owner to get an invalid transaction
validated. Everything else describes the simulated population.
"""

from dataclasses import dataclass
import numpy as np


# =============================================================================
# REPRODUCIBILITY
# =============================================================================

RANDOM_SEED = 42      # Fixed seed for reproducibility
DEFAULT_SLOTS = 100   # Number of simulated time slots


# =============================================================================
# EXPERIMENT PARAMETERS
# =============================================================================

@dataclass(frozen=True)
class ExperimentParams:
    """Population and validation parameters for one simulation run."""

    signature_threshold: int = 3       # T, malicious signatures needed
    n_nodes: int = 100                 # Skip graph size
    malicious_fraction: float = 0.16   # Share of malicious nodes
    validators_per_tx: int = 5         # Validators acquired per transaction
    tx_per_slot: int = 20              # Transactions generated per time slot

    @property
    def n_malicious(self) -> int:
        """Number of malicious nodes in the population."""
        return int(round(self.n_nodes * self.malicious_fraction))

    def validate(self) -> bool:
        """Verify the parameters describe a runnable experiment."""
        return (
            self.signature_threshold >= 0
            and 0.0 <= self.malicious_fraction <= 1.0
            and self.tx_per_slot >= 0
            # Owner cannot validate its own transaction
            and 0 <= self.validators_per_tx < self.n_nodes
        )


DEFAULT_PARAMS = ExperimentParams()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def get_rng(seed: int = RANDOM_SEED) -> np.random.Generator:
    """Get a reproducible random number generator."""
    return np.random.default_rng(seed)


def validate_all_params() -> bool:
    """Validate the default parameter set."""
    assert DEFAULT_PARAMS.validate(), "Default experiment parameters invalid"
    assert DEFAULT_PARAMS.n_malicious <= DEFAULT_PARAMS.n_nodes, "Malicious count exceeds population"
    return True


if __name__ == "__main__":
    validate_all_params()
    print("✓ All parameters validated successfully")
    print(f"  - Signature threshold: {DEFAULT_PARAMS.signature_threshold}")
    print(f"  - Malicious nodes: {DEFAULT_PARAMS.n_malicious}/{DEFAULT_PARAMS.n_nodes}")
    print(f"  - Validators per transaction: {DEFAULT_PARAMS.validators_per_tx}")
