"""Shared pytest fixtures for lightchain_sim tests."""

import io

import pytest

from lightchain_sim.config import ExperimentParams
from lightchain_sim.malicious_success import SuccessAggregator


@pytest.fixture
def stream():
    """In-memory report stream."""
    return io.StringIO()


@pytest.fixture
def aggregator(stream):
    """Aggregator with threshold 3 writing to the in-memory stream."""
    return SuccessAggregator(signature_threshold=3, stream=stream)


@pytest.fixture
def small_params():
    """Small population that keeps simulations fast."""
    return ExperimentParams(
        signature_threshold=2,
        n_nodes=20,
        malicious_fraction=0.3,
        validators_per_tx=4,
        tx_per_slot=5,
    )
