"""
LightChain Validator Acquisition Simulation
===========================================

Slot-based Monte Carlo simulation of validator acquisition under a
population containing malicious nodes.

Every time slot a number of owners generate a transaction and each
transaction acquires a random set of distinct validators (never its own
owner). Acquisitions are fed to the malicious success experiment, which
closes the slot and reports:
- Per-slot average malicious success chance
- Average malicious success chance over time

The observed chance is compared against the analytic hypergeometric
probability that a malicious owner draws at least T malicious validators.
"""

import argparse
import logging
from dataclasses import dataclass, field
from math import comb
from typing import List, Optional, TextIO
import numpy as np
from tabulate import tabulate

from .config import (
    RANDOM_SEED,
    DEFAULT_SLOTS,
    DEFAULT_PARAMS,
    ExperimentParams,
    get_rng,
)
from .entities import Node, Transaction
from .malicious_success import SlotResult, SuccessAggregator

logger = logging.getLogger(__name__)


@dataclass
class AcquisitionResult:
    """Results from an acquisition simulation run."""

    params: ExperimentParams
    slots: int
    slot_results: List[SlotResult] = field(default_factory=list)

    # Totals over the whole run
    malicious_acquisitions: int = 0
    successful_attacks: int = 0
    overall_success_chance: float = 0.0

    @property
    def slots_with_malicious_owners(self) -> int:
        return sum(1 for r in self.slot_results if r.had_malicious_owners)

    @property
    def pooled_success_chance(self) -> float:
        """Successful attacks over all malicious acquisitions of the run."""
        if self.malicious_acquisitions == 0:
            return 0.0
        return self.successful_attacks / self.malicious_acquisitions


def expected_success_chance(params: ExperimentParams) -> float:
    """
    Probability that a malicious owner acquires at least T malicious validators.

    Validators are drawn without replacement from the other n - 1 nodes, of
    which n_malicious - 1 are malicious, so the count is hypergeometric.
    """
    if params.n_malicious == 0:
        return 0.0
    others = params.n_nodes - 1
    bad = params.n_malicious - 1
    good = others - bad
    draws = params.validators_per_tx

    total = comb(others, draws)
    favourable = sum(
        comb(bad, k) * comb(good, draws - k)
        for k in range(params.signature_threshold, draws + 1)
    )
    return favourable / total


class AcquisitionSimulator:
    """
    Discrete time-slot simulator for validator acquisition.

    The same aggregator is reused across runs and reset at the start of each.
    """

    def __init__(
        self,
        params: ExperimentParams = DEFAULT_PARAMS,
        seed: int = RANDOM_SEED,
        stream: Optional[TextIO] = None,
    ):
        if not params.validate():
            raise ValueError(f"invalid experiment parameters: {params}")
        self.params = params
        self.rng = get_rng(seed)
        self.aggregator = SuccessAggregator(
            signature_threshold=params.signature_threshold,
            stream=stream,
        )
        self.nodes = self._build_nodes()

    def _build_nodes(self) -> List[Node]:
        """Create the population, marking a random subset as malicious."""
        malicious = set(
            self.rng.choice(self.params.n_nodes, self.params.n_malicious, replace=False).tolist()
        )
        return [Node(index=i, is_malicious=i in malicious) for i in range(self.params.n_nodes)]

    def _acquire_validators(self, owner: Node) -> Transaction:
        """Acquire distinct validators for a transaction of ``owner``."""
        candidates = np.array([n.index for n in self.nodes if n.index != owner.index])
        chosen = self.rng.choice(candidates, self.params.validators_per_tx, replace=False)
        return Transaction(owner=owner, validators=[self.nodes[i] for i in chosen.tolist()])

    def simulate(self, slots: int = DEFAULT_SLOTS) -> AcquisitionResult:
        """
        Run the experiment for a number of time slots.

        Args:
            slots: Number of time slots to simulate

        Returns:
            AcquisitionResult with per-slot and overall statistics
        """
        self.aggregator.reset()
        result = AcquisitionResult(params=self.params, slots=slots)

        for time in range(slots):
            owners = self.rng.integers(self.params.n_nodes, size=self.params.tx_per_slot)
            for owner_index in owners.tolist():
                owner = self.nodes[owner_index]
                tx = self._acquire_validators(owner)
                self.aggregator.inform_transaction(owner, tx, time)

            slot_result = self.aggregator.calculate_results(time)
            result.slot_results.append(slot_result)
            result.malicious_acquisitions += slot_result.acquisitions

        ledger = self.aggregator.ledger
        result.successful_attacks = sum(sum(tally.values()) for tally in ledger.values())
        result.overall_success_chance = self.aggregator.overall_success_chance
        logger.debug(
            "simulated %d slots, %d malicious acquisitions, %d successes",
            slots, result.malicious_acquisitions, result.successful_attacks,
        )
        return result


def generate_summary_table(result: AcquisitionResult) -> str:
    """Summarize a run as a two-column table."""
    p = result.params
    rows = [
        ["Time slots", f"{result.slots:,}"],
        ["Slots with malicious owners", f"{result.slots_with_malicious_owners:,}"],
        ["Malicious acquisitions", f"{result.malicious_acquisitions:,}"],
        ["Successful attacks", f"{result.successful_attacks:,}"],
        ["Avg. success chance over time", f"{result.overall_success_chance:.4f}"],
        ["Pooled success chance", f"{result.pooled_success_chance:.4f}"],
        ["Analytic success chance", f"{expected_success_chance(p):.4f}"],
    ]
    return tabulate(rows, headers=["Metric", "Value"], tablefmt="simple")


def main(argv: Optional[List[str]] = None):
    """Run the malicious success experiment and print a summary."""
    parser = argparse.ArgumentParser(
        description="LightChain Malicious Success Experiment"
    )
    parser.add_argument(
        "--slots", "-n",
        type=int,
        default=DEFAULT_SLOTS,
        help=f"Number of time slots (default: {DEFAULT_SLOTS})"
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=RANDOM_SEED,
        help=f"Random seed for reproducibility (default: {RANDOM_SEED})"
    )
    parser.add_argument(
        "--threshold", "-t",
        type=int,
        default=DEFAULT_PARAMS.signature_threshold,
        help=f"Signature threshold T (default: {DEFAULT_PARAMS.signature_threshold})"
    )
    parser.add_argument(
        "--nodes",
        type=int,
        default=DEFAULT_PARAMS.n_nodes,
        help=f"Number of nodes (default: {DEFAULT_PARAMS.n_nodes})"
    )
    parser.add_argument(
        "--malicious-fraction",
        type=float,
        default=DEFAULT_PARAMS.malicious_fraction,
        help=f"Fraction of malicious nodes (default: {DEFAULT_PARAMS.malicious_fraction})"
    )
    parser.add_argument(
        "--validators",
        type=int,
        default=DEFAULT_PARAMS.validators_per_tx,
        help=f"Validators acquired per transaction (default: {DEFAULT_PARAMS.validators_per_tx})"
    )
    parser.add_argument(
        "--tx-per-slot",
        type=int,
        default=DEFAULT_PARAMS.tx_per_slot,
        help=f"Transactions generated per slot (default: {DEFAULT_PARAMS.tx_per_slot})"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    params = ExperimentParams(
        signature_threshold=args.threshold,
        n_nodes=args.nodes,
        malicious_fraction=args.malicious_fraction,
        validators_per_tx=args.validators,
        tx_per_slot=args.tx_per_slot,
    )
    if not params.validate():
        parser.error(f"invalid experiment parameters: {params}")

    print(f"LightChain Malicious Success Experiment")
    print(f"=======================================")
    print(f"Slots: {args.slots:,}")
    print(f"Seed: {args.seed}")
    print(f"Signature threshold: {params.signature_threshold}")
    print(f"Malicious nodes: {params.n_malicious}/{params.n_nodes}")
    print()

    sim = AcquisitionSimulator(params=params, seed=args.seed)
    result = sim.simulate(slots=args.slots)

    print()
    print("Summary")
    print("=" * 50)
    print(generate_summary_table(result))
    print()

    expected = expected_success_chance(params)
    tolerance = 0.05  # Absolute tolerance for stochastic variation
    diff = abs(result.pooled_success_chance - expected)
    status = "✓" if diff < tolerance else "⚠"
    print("Verification against analytic model:")
    print(f"  {status} Pooled success chance: {result.pooled_success_chance:.4f} "
          f"(expected ~{expected:.4f}, diff={diff:.4f})")


if __name__ == "__main__":
    main()
