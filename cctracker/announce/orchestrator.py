"""Announce pipeline.

Sequences one announce request through

    parsing -> validating -> updating -> reading -> prioritizing
            -> sampling -> encoding -> done

Every stage either advances or terminates the request with
:class:`~cctracker.exceptions.AnnounceFailed` naming the stage. Nothing
is retried and nothing is rolled back: a peer record written in the
updating stage stays written even if a later stage fails.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from cctracker.announce.encoder import encode_announce_response
from cctracker.announce.parser import (
    QueryValue,
    parse_announce_event,
    parse_numwant,
    to_peer_record,
)
from cctracker.exceptions import (
    AnnounceFailed,
    CCTrackerError,
    EncodingError,
    PolicyError,
    StorageError,
    ValidationError,
)
from cctracker.models import AnnounceResponse, PeerRecord
from cctracker.observability import (
    AnnounceEvent,
    AnnounceEventType,
    AnnounceObserver,
    LoggingObserver,
)
from cctracker.policy.base import HandoutPolicy
from cctracker.storage.base import SwarmRepository

T = TypeVar("T")


class AnnounceStage(str, Enum):
    """Stages of the announce pipeline."""

    PARSING = "parsing"
    VALIDATING = "validating"
    UPDATING = "updating"
    READING = "reading"
    PRIORITIZING = "prioritizing"
    SAMPLING = "sampling"
    ENCODING = "encoding"
    DONE = "done"


_STAGE_ERRORS: dict[AnnounceStage, type[CCTrackerError]] = {
    AnnounceStage.PARSING: ValidationError,
    AnnounceStage.VALIDATING: ValidationError,
    AnnounceStage.UPDATING: StorageError,
    AnnounceStage.READING: StorageError,
    AnnounceStage.PRIORITIZING: PolicyError,
    AnnounceStage.SAMPLING: PolicyError,
    AnnounceStage.ENCODING: EncodingError,
}


class AnnounceOrchestrator:
    """Runs announce requests against a swarm repository and a handout policy.

    Holds no per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        repository: SwarmRepository,
        policy: HandoutPolicy,
        interval: int,
        observer: AnnounceObserver | None = None,
    ):
        """Initialize the pipeline.

        Args:
            repository: Peer record storage
            policy: Peer handout policy
            interval: Seconds peers should wait before re-announcing
            observer: Event sink; defaults to a :class:`LoggingObserver`

        """
        if interval <= 0:
            msg = f"Announce interval must be positive, got {interval}"
            raise ValueError(msg)
        self.repository = repository
        self.policy = policy
        self.interval = interval
        self.observer = observer or LoggingObserver()

    def _fail(
        self,
        stage: AnnounceStage,
        error: Exception,
        info_hash: str | None,
    ) -> AnnounceFailed:
        expected = _STAGE_ERRORS[stage]
        if isinstance(error, expected):
            cause: CCTrackerError = error
        else:
            cause = expected(str(error) or type(error).__name__)
            cause.__cause__ = error

        if isinstance(cause, ValidationError):
            self.observer.emit(
                AnnounceEvent(
                    AnnounceEventType.ANNOUNCE_REJECTED,
                    info_hash,
                    {
                        "stage": stage.value,
                        "field": getattr(cause, "field", None),
                        "error": str(cause),
                    },
                )
            )
        else:
            self.observer.emit(
                AnnounceEvent(
                    AnnounceEventType.ANNOUNCE_FAILED,
                    info_hash,
                    {"stage": stage.value, "error": str(cause)},
                )
            )
        return AnnounceFailed(stage.value, cause)

    async def _call(
        self,
        stage: AnnounceStage,
        info_hash: str,
        func: Callable[..., Awaitable[T]],
        *args: Any,
    ) -> T:
        try:
            return await func(*args)
        except Exception as e:
            raise self._fail(stage, e, info_hash) from e

    def _call_sync(
        self,
        stage: AnnounceStage,
        info_hash: str | None,
        func: Callable[..., T],
        *args: Any,
    ) -> T:
        try:
            return func(*args)
        except Exception as e:
            raise self._fail(stage, e, info_hash) from e

    async def announce(self, query: Mapping[str, QueryValue]) -> bytes:
        """Handle one announce and return the bencoded response body.

        Raises:
            AnnounceFailed: when any stage fails. ``is_client_error`` is
                true for parsing and validation failures.

        """
        event = self._call_sync(AnnounceStage.PARSING, None, parse_announce_event, query)
        info_hash = event.info_hash
        self.observer.emit(
            AnnounceEvent(
                AnnounceEventType.ANNOUNCE_RECEIVED,
                info_hash,
                {"peer_id": event.peer_id, "event": event.event},
            )
        )

        record = self._call_sync(AnnounceStage.VALIDATING, info_hash, to_peer_record, event)
        numwant = self._call_sync(AnnounceStage.VALIDATING, info_hash, parse_numwant, event)

        # Update before read so the snapshot includes the requester
        await self._call(AnnounceStage.UPDATING, info_hash, self.repository.update, record)
        peers = list(
            await self._call(AnnounceStage.READING, info_hash, self.repository.read, info_hash)
        )

        self._call_sync(
            AnnounceStage.PRIORITIZING,
            info_hash,
            self.policy.assign_priority,
            record.ip,
            record.dc,
            peers,
        )
        limit = len(peers) if numwant is None else min(numwant, len(peers))
        selected = self._call_sync(
            AnnounceStage.SAMPLING, info_hash, self.policy.sample, peers, limit
        )

        body = self._call_sync(
            AnnounceStage.ENCODING, info_hash, self._encode, selected
        )
        self.observer.emit(
            AnnounceEvent(
                AnnounceEventType.ANNOUNCE_COMPLETED,
                info_hash,
                {"peer_id": record.peer_id, "peers": len(selected)},
            )
        )
        return body

    def _encode(self, peers: list[PeerRecord]) -> bytes:
        response = AnnounceResponse(interval=self.interval, peers=list(peers))
        return encode_announce_response(response)
