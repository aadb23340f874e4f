"""
State Transition Logic for Video Assets.

Contains business rules for valid asset state transitions and for
transcoding candidacy. Separated from data models for clean architecture.

Exports:
    can_asset_transition: Check if asset state transition is valid
    get_asset_terminal_states: Get terminal states for assets
    get_asset_active_states: Get states with a job in flight
    is_asset_terminal: Check if asset is in terminal state
    is_remote_job_terminal: Check if a remote job has finished
    is_transcode_candidate: Check if an asset may be claimed

Dependencies:
    core.models.enums: AssetStatus, RemoteJobStatus
"""

from typing import List

from ..models.enums import AssetStatus, RemoteJobStatus
from ..models.video_asset import VideoAsset


def can_asset_transition(current: AssetStatus, target: AssetStatus) -> bool:
    """
    Check if an asset can transition from current to target status.

    Args:
        current: Current asset status
        target: Target asset status

    Returns:
        True if transition is valid, False otherwise
    """
    # Same status is always allowed (no-op)
    if current == target:
        return True

    transitions = {
        AssetStatus.READY: [AssetStatus.PROCESSING],
        AssetStatus.PROCESSING: [AssetStatus.READY, AssetStatus.ERROR],
        AssetStatus.ERROR: []  # Terminal state
    }

    return target in transitions.get(current, [])


def get_asset_terminal_states() -> List[AssetStatus]:
    """
    Get list of terminal states for assets.

    Returns:
        List of terminal asset statuses
    """
    return [AssetStatus.ERROR]


def get_asset_active_states() -> List[AssetStatus]:
    """
    Get list of states in which a transcoding job is in flight.

    Returns:
        List of active asset statuses
    """
    return [AssetStatus.PROCESSING]


def is_asset_terminal(status: AssetStatus) -> bool:
    """Check if an asset status is terminal."""
    return status in get_asset_terminal_states()


def is_remote_job_terminal(status: RemoteJobStatus) -> bool:
    """Check if a transcoding service job has finished, successfully or not."""
    return status in (
        RemoteJobStatus.COMPLETE,
        RemoteJobStatus.ERROR,
        RemoteJobStatus.CANCELED,
    )


def is_transcode_candidate(asset: VideoAsset) -> bool:
    """
    Check if an asset qualifies for a new transcoding job.

    Same predicate the claim's conditional update enforces in the store:
    ready, flagged for transcoding and not assigned downstream.
    """
    return (
        asset.status == AssetStatus.READY
        and asset.needs_transcoding
        and asset.assigned_target is None
    )
