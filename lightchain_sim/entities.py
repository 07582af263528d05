"""
Skip graph participants as seen by the experiments.

Only the parts an experiment observes are modelled: a node's index and
whether it is malicious, and the validators a transaction acquired.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Node:
    """A skip graph node."""
    index: int
    is_malicious: bool = False


@dataclass
class Transaction:
    """A transaction together with the validators it acquired."""
    owner: Node
    validators: List[Node] = field(default_factory=list)

    @property
    def malicious_validators(self) -> int:
        return sum(1 for v in self.validators if v.is_malicious)
