import pytest

from payment_analyzer.fingerprint import PriorSubmission
from payment_analyzer.services import (
    AnalysisRepository,
    FingerprintHistory,
    InMemoryFingerprintHistory,
    PriorAnalysisSource,
)


class _Repo:
    def __init__(self, items=None, error=None):
        self.items = items or []
        self.error = error

    def list_submissions(self, user_id):
        if self.error is not None:
            raise self.error
        return [s for s in self.items if s.analysis_id.startswith(user_id)]


class TestInMemoryFingerprintHistory:
    def test_satisfies_protocol(self):
        assert isinstance(InMemoryFingerprintHistory(), FingerprintHistory)
        assert isinstance(_Repo(), AnalysisRepository)

    def test_same_fingerprint_replaces(self):
        h = InMemoryFingerprintHistory()
        h.remember("u1", PriorSubmission("fp1", None, "a1"))
        h.remember("u1", PriorSubmission("fp2", None, "a2"))
        h.remember("u1", PriorSubmission("fp1", None, "a3"))

        assert [(s.fingerprint, s.analysis_id) for s in h.list_submissions("u1")] == [("fp2", "a2"), ("fp1", "a3")]
        assert h.list_submissions("u2") == []


class TestPriorAnalysisSource:
    def test_repository_first(self):
        repo = _Repo([PriorSubmission("fp", None, "u1-a")])
        cache = InMemoryFingerprintHistory()
        cache.remember("u1", PriorSubmission("cached", None, "x"))

        assert [s.fingerprint for s in PriorAnalysisSource("u1", repo, cache)()] == ["fp"]

    def test_falls_back_to_cache(self):
        cache = InMemoryFingerprintHistory()
        cache.remember("u1", PriorSubmission("cached", None, "x"))
        source = PriorAnalysisSource("u1", _Repo(error=ConnectionError("down")), cache)

        assert [s.fingerprint for s in source()] == ["cached"]

    def test_error_without_cache_propagates(self):
        source = PriorAnalysisSource("u1", _Repo(error=ConnectionError("down")))
        with pytest.raises(ConnectionError):
            source()

    def test_nothing_configured(self):
        assert PriorAnalysisSource("u1")() == []
