"""
Candidate Selector.

Finds the video assets that should get a new transcoding job: ready,
flagged for transcoding at ingestion and not yet assigned downstream.
Read-only; the claim made later by the JobSubmitter is what actually
reserves an asset.

Exports:
    CandidateSelector: Bounded candidate query and window partitioning
"""

from typing import List, Optional

from core.logic.transitions import is_transcode_candidate
from core.models import VideoAsset
from infrastructure.interface_repository import IAssetRepository
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "CandidateSelector")


class CandidateSelector:
    """
    Bounded candidate selection.

    Storage errors propagate unchanged (DatabaseError): a failed candidate
    query is not a per-asset failure and the caller must see it.
    """

    def __init__(self, repository: IAssetRepository):
        self.repo = repository

    def select(self, scope_id: Optional[str] = None, max_batch_size: int = 20) -> List[VideoAsset]:
        """
        Up to max_batch_size candidates, oldest first.

        Args:
            scope_id: Project to restrict to, None for all projects
            max_batch_size: Upper bound on the number returned

        Returns:
            List of candidate assets, empty when nothing qualifies
        """
        if max_batch_size < 1:
            raise ValueError(f"max_batch_size must be >= 1, got {max_batch_size}")

        assets = self.repo.select_candidates(scope_id, max_batch_size)

        # The store applies the same predicate; re-check so a misbehaving
        # backend can never hand an in-flight asset to the submitter
        candidates = [a for a in assets if is_transcode_candidate(a)][:max_batch_size]
        if len(candidates) != len(assets):
            logger.warning(
                f"⚠️ Store returned {len(assets) - len(candidates)} non-candidate asset(s); ignored"
            )

        logger.info(f"🔎 Selected {len(candidates)} candidate(s) for scope {scope_id or '*'}")
        return candidates

    @staticmethod
    def partition(assets: List[VideoAsset], window: int) -> List[List[VideoAsset]]:
        """Split a selection into consecutive submission windows of at most `window` assets."""
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")
        return [assets[i:i + window] for i in range(0, len(assets), window)]
