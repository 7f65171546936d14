"""Registry of named priority and sampling policies."""

from __future__ import annotations

from cctracker.exceptions import PolicyNotFoundError
from cctracker.policy.base import PeerHandoutPolicy, PriorityPolicy, SamplingPolicy
from cctracker.policy.priority import (
    datacenter_priority,
    default_priority,
    ipv4_netmask_priority,
)
from cctracker.policy.sampling import default_sampling, random_sampling

_PRIORITY_POLICIES: dict[str, PriorityPolicy] = {
    "default": default_priority,
    "datacenter": datacenter_priority,
    "ipv4netmask": ipv4_netmask_priority,
}

_SAMPLING_POLICIES: dict[str, SamplingPolicy] = {
    "default": default_sampling,
    "random": random_sampling,
}


def register_priority_policy(name: str, policy: PriorityPolicy) -> None:
    """Register a priority policy under ``name``."""
    _PRIORITY_POLICIES[name] = policy


def register_sampling_policy(name: str, policy: SamplingPolicy) -> None:
    """Register a sampling policy under ``name``."""
    _SAMPLING_POLICIES[name] = policy


def priority_policies() -> list[str]:
    return sorted(_PRIORITY_POLICIES)


def sampling_policies() -> list[str]:
    return sorted(_SAMPLING_POLICIES)


def get_policy(priority: str, sampling: str) -> PeerHandoutPolicy:
    """Build the handout policy for a priority/sampling name pair.

    Raises:
        PolicyNotFoundError: if either name is not registered.

    """
    if priority not in _PRIORITY_POLICIES:
        msg = f"Peer handout priority policy not found: {priority}"
        raise PolicyNotFoundError(msg, {"available": priority_policies()})
    if sampling not in _SAMPLING_POLICIES:
        msg = f"Peer handout sampling policy not found: {sampling}"
        raise PolicyNotFoundError(msg, {"available": sampling_policies()})
    return PeerHandoutPolicy(_PRIORITY_POLICIES[priority], _SAMPLING_POLICIES[sampling])
