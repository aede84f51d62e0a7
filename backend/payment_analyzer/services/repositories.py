from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Protocol, runtime_checkable

from ..fingerprint.fingerprint_service import PriorSubmission

logger = logging.getLogger(__name__)


@runtime_checkable
class AnalysisRepository(Protocol):
    """Durable store of prior analyses (implemented outside the core)."""

    def list_submissions(self, user_id: str) -> List[PriorSubmission]: ...


@runtime_checkable
class FingerprintHistory(Protocol):
    """Local cache of submissions seen on this client."""

    def list_submissions(self, user_id: str) -> List[PriorSubmission]: ...

    def remember(self, user_id: str, submission: PriorSubmission) -> None: ...


class InMemoryFingerprintHistory:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_user: Dict[str, List[PriorSubmission]] = {}

    def list_submissions(self, user_id: str) -> List[PriorSubmission]:
        with self._lock:
            return list(self._by_user.get(user_id, ()))

    def remember(self, user_id: str, submission: PriorSubmission) -> None:
        with self._lock:
            items = self._by_user.setdefault(user_id, [])
            items[:] = [s for s in items if s.fingerprint != submission.fingerprint]
            items.append(submission)


class PriorAnalysisSource:
    """
    Callable returning a user's prior submissions.

    The repository is asked first; when it raises, the local cache answers
    instead. With no cache the repository error propagates.
    """

    def __init__(
        self,
        user_id: str,
        repository: Optional[AnalysisRepository] = None,
        cache: Optional[FingerprintHistory] = None,
    ) -> None:
        self.user_id = user_id
        self.repository = repository
        self.cache = cache

    def __call__(self) -> List[PriorSubmission]:
        if self.repository is not None:
            try:
                return list(self.repository.list_submissions(self.user_id))
            except Exception as e:  # noqa: BLE001
                if self.cache is None:
                    raise
                logger.warning("repository unavailable, using local history: %s", e)
        if self.cache is not None:
            return list(self.cache.list_submissions(self.user_id))
        return []
