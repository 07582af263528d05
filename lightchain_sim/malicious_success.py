"""
LightChain Malicious Success Experiment
=======================================

Measures the chance of a malicious success during validator acquisition.

When a malicious transaction owner manages to acquire at least
signature-threshold (T) many malicious validators, the forged transaction
would pass validation. We call this a malicious success.

The simulation loop reports every acquisition with ``inform_acquisition``
(or ``inform_transaction``) and closes each time slot with
``calculate_results``, which prints the slot's average success chance and
the running average over all slots so far.
"""

import copy
import logging
import sys
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, TextIO, Tuple

from .config import DEFAULT_PARAMS
from .entities import Node, Transaction

logger = logging.getLogger(__name__)

REPORT_PREFIX = "Malicious Success Experiment:"


class InvalidArgument(ValueError):
    """Raised for negative counts, thresholds or time slots."""


@dataclass(frozen=True)
class SlotResult:
    """Outcome of closing one time slot."""

    time: int
    # None when no malicious owner generated a transaction in the slot
    slot_success_chance: Optional[float]
    overall_success_chance: float
    acquisitions: int

    @property
    def had_malicious_owners(self) -> bool:
        return self.slot_success_chance is not None


class SuccessAggregator:
    """
    Per-slot malicious success bookkeeping for one simulation run.

    All three pieces of state are guarded by a single lock, so acquisitions
    may be reported from several threads and ``calculate_results`` always
    sees a consistent snapshot.
    """

    def __init__(
        self,
        signature_threshold: int = DEFAULT_PARAMS.signature_threshold,
        stream: Optional[TextIO] = None,
    ):
        if signature_threshold < 0:
            raise InvalidArgument(f"signature threshold must be non-negative, got {signature_threshold}")
        self.signature_threshold = signature_threshold
        self.stream = stream

        self._lock = threading.Lock()
        # Time -> (malicious owner index -> malicious success #)
        self._ledger: Dict[int, Dict[int, int]] = {}
        # Malicious success chance of each closed slot, in closing order
        self._history: List[float] = []
        # Malicious owner acquisitions since the last closed slot
        self._acquisitions = 0
        self._closed: Set[int] = set()

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def inform_acquisition(
        self,
        owner_is_malicious: bool,
        owner_id: int,
        malicious_validators: int,
        signature_threshold: int,
        time: int,
    ) -> None:
        """
        Record that a transaction has acquired its validators.

        Transactions of honest owners are ignored.

        Args:
            owner_is_malicious: Whether the transaction owner is malicious
            owner_id: Index of the owner node
            malicious_validators: How many acquired validators are malicious
            signature_threshold: Malicious signatures needed for a success
            time: Current time slot

        Raises:
            InvalidArgument: On a negative count, threshold or time slot
        """
        # Honest owners are ignored entirely, malformed or not
        if not owner_is_malicious:
            return

        if malicious_validators < 0:
            raise InvalidArgument(f"malicious validator count must be non-negative, got {malicious_validators}")
        if signature_threshold < 0:
            raise InvalidArgument(f"signature threshold must be non-negative, got {signature_threshold}")
        if time < 0:
            raise InvalidArgument(f"time slot must be non-negative, got {time}")

        with self._lock:
            self._acquisitions += 1
            tally = self._ledger.setdefault(time, {})
            tally.setdefault(owner_id, 0)
            if malicious_validators >= signature_threshold:
                tally[owner_id] += 1
                logger.debug(
                    "t=%d: owner %d succeeded with %d/%d malicious validators",
                    time, owner_id, malicious_validators, signature_threshold,
                )

    def inform_transaction(
        self,
        owner: Node,
        tx: Transaction,
        time: int,
        signature_threshold: Optional[int] = None,
    ) -> None:
        """Record the acquisition of ``tx`` by ``owner`` at ``time``."""
        if signature_threshold is None:
            signature_threshold = self.signature_threshold
        self.inform_acquisition(
            owner.is_malicious,
            owner.index,
            tx.malicious_validators,
            signature_threshold,
            time,
        )

    # -------------------------------------------------------------------------
    # Slot reduction
    # -------------------------------------------------------------------------

    def calculate_results(self, time: int) -> SlotResult:
        """
        Calculate and report the results at the end of a time slot.

        Must be called once at the end of every time slot. Closing a slot
        again after new acquisitions counts it twice in the overall average;
        closing it again without any reports nothing for the slot.

        Args:
            time: Time slot being closed

        Returns:
            SlotResult with the slot and overall success chances
        """
        with self._lock:
            acquisitions = self._acquisitions
            lines = []

            # A closed slot keeps its ledger entry, so an entry alone does not
            # mean anything was acquired since the last close.
            if time not in self._ledger or acquisitions == 0:
                slot_chance = None
                if time in self._closed:
                    logger.warning("t=%d closed again without new acquisitions", time)
                lines.append(
                    f"{REPORT_PREFIX} For t={time} there were no malicious nodes "
                    f"chosen to generate a transaction."
                )
            else:
                if time in self._closed:
                    logger.warning("t=%d closed more than once, it will be counted again", time)
                # Successes over all malicious acquisitions of the slot, not a per-owner mean
                slot_chance = sum(self._ledger[time].values()) / acquisitions
                lines.append(
                    f"{REPORT_PREFIX} For t={time} the avg malicious success chance "
                    f"(over the malicious nodes) was {slot_chance}"
                )
                self._history.append(slot_chance)
                self._closed.add(time)

            overall = self._overall()
            lines.append(f"{REPORT_PREFIX} Avg. malicious success chance over time is {overall}")
            self._acquisitions = 0

            # Printed under the lock so report order matches history order
            for line in lines:
                print(line, file=self.stream or sys.stdout)

        return SlotResult(
            time=time,
            slot_success_chance=slot_chance,
            overall_success_chance=overall,
            acquisitions=acquisitions,
        )

    def _overall(self) -> float:
        if not self._history:
            return 0.0
        return sum(self._history) / len(self._history)

    # -------------------------------------------------------------------------
    # Lifecycle and views
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Forget everything, ready for an independent run."""
        with self._lock:
            self._ledger.clear()
            self._history.clear()
            self._closed.clear()
            self._acquisitions = 0
        logger.debug("aggregator reset")

    @property
    def ledger(self) -> Dict[int, Dict[int, int]]:
        """Copy of the time -> (owner -> success count) ledger."""
        with self._lock:
            return copy.deepcopy(self._ledger)

    @property
    def history(self) -> Tuple[float, ...]:
        with self._lock:
            return tuple(self._history)

    @property
    def acquisitions(self) -> int:
        with self._lock:
            return self._acquisitions

    @property
    def overall_success_chance(self) -> float:
        with self._lock:
            return self._overall()
