"""
Candidate selection tests.
"""

from datetime import timedelta

import pytest

from core.models import AssetStatus
from exceptions import DatabaseError
from services.candidate_selector import CandidateSelector
from tests.fakes import FakeAssetRepository
from tests.factories.model_factories import make_processing_asset, make_video_asset


def test_batch_is_bounded(repo, epoch):
    for i in range(50):
        repo.add(make_video_asset(created_at=epoch + timedelta(seconds=i)))

    selected = CandidateSelector(repo).select(max_batch_size=20)
    assert len(selected) == 20
    assert all(a.status == AssetStatus.READY for a in selected)


def test_oldest_first(repo, epoch):
    newest = make_video_asset(created_at=epoch)
    oldest = make_video_asset(created_at=epoch - timedelta(days=2))
    middle = make_video_asset(created_at=epoch - timedelta(days=1))
    for asset in (newest, oldest, middle):
        repo.add(asset)

    selected = CandidateSelector(repo).select(max_batch_size=10)
    assert [a.id for a in selected] == [oldest.id, middle.id, newest.id]


def test_only_candidates(repo):
    eligible = make_video_asset()
    repo.add(eligible)
    repo.add(make_video_asset(assigned_target="report-1"))
    repo.add(make_video_asset(needs_transcoding=False))
    repo.add(make_processing_asset())
    repo.add(make_video_asset(status=AssetStatus.ERROR))

    assert [a.id for a in CandidateSelector(repo).select()] == [eligible.id]


def test_scope_filter(repo):
    mine = make_video_asset(project_id="proj-a")
    repo.add(mine)
    repo.add(make_video_asset(project_id="proj-b"))
    repo.add(make_video_asset(project_id=None))

    assert [a.id for a in CandidateSelector(repo).select("proj-a")] == [mine.id]


def test_empty_store(repo):
    assert CandidateSelector(repo).select() == []


def test_non_candidates_from_store_are_dropped():
    class LeakyRepository(FakeAssetRepository):
        def select_candidates(self, scope_id, limit):
            return list(self.assets.values())

    leaky = LeakyRepository([make_video_asset(), make_processing_asset()])
    selected = CandidateSelector(leaky).select()
    assert len(selected) == 1
    assert selected[0].status == AssetStatus.READY


def test_store_failure_propagates(repo):
    repo.fail("select_candidates")
    with pytest.raises(DatabaseError):
        CandidateSelector(repo).select()


def test_invalid_batch_size(repo):
    with pytest.raises(ValueError):
        CandidateSelector(repo).select(max_batch_size=0)


class TestPartition:

    def test_windows(self):
        assets = [make_video_asset() for _ in range(7)]
        windows = CandidateSelector.partition(assets, 3)
        assert [len(w) for w in windows] == [3, 3, 1]
        assert [a.id for w in windows for a in w] == [a.id for a in assets]

    def test_empty(self):
        assert CandidateSelector.partition([], 3) == []

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            CandidateSelector.partition([make_video_asset()], 0)
