"""Sampling policies."""

from __future__ import annotations

import random

from cctracker.models import PeerRecord


def default_sampling(peers: list[PeerRecord], limit: int) -> list[PeerRecord]:
    """Take the ``limit`` best-priority peers, shuffling within equal priorities."""
    shuffled = list(peers)
    random.shuffle(shuffled)  # nosec B311
    shuffled.sort(key=lambda p: p.priority)
    return shuffled[:limit]


def random_sampling(peers: list[PeerRecord], limit: int) -> list[PeerRecord]:
    """Take ``limit`` peers uniformly at random, ignoring priority."""
    return random.sample(peers, min(limit, len(peers)))  # nosec B311
