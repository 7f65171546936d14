"""Peer handout policies: priority assignment and sampling."""

from cctracker.policy.base import (
    HandoutPolicy,
    PeerHandoutPolicy,
    PriorityPolicy,
    SamplingPolicy,
)
from cctracker.policy.registry import (
    get_policy,
    priority_policies,
    register_priority_policy,
    register_sampling_policy,
    sampling_policies,
)

__all__ = [
    "HandoutPolicy",
    "PeerHandoutPolicy",
    "PriorityPolicy",
    "SamplingPolicy",
    "get_policy",
    "priority_policies",
    "register_priority_policy",
    "register_sampling_policy",
    "sampling_policies",
]
