"""
Output Resolver.

Computes where the transcoded rendition of an asset lives. The location
depends only on the asset's identity, its scope and the target resolution
(plus static bucket configuration), so the value recorded at submission
and the value written at completion are always the same string.

Layout:
    s3://{bucket}/{prefix}/{scope}/{asset_id}              job destination base
    {asset_id}-{resolution}p.mp4                           file the service writes
    https://{bucket}.s3.{region}.amazonaws.com/{key}       playable location

Exports:
    OutputResolver: Pure location calculator
"""

from typing import Optional

from config.encoding_config import EncodingConfig
from config.defaults import EncodingDefaults
from exceptions import ContractViolationError


class OutputResolver:
    """
    Deterministic output location calculator.

    Usage:
        resolver = OutputResolver.from_config(config.encoding)
        url = resolver.resolve("a1b2", "proj-7", 480)
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        prefix: str = EncodingDefaults.OUTPUT_PREFIX,
        unscoped_segment: str = EncodingDefaults.UNSCOPED_SEGMENT
    ):
        if not bucket or not region:
            raise ContractViolationError("OutputResolver requires a bucket and a region")
        self.bucket = bucket
        self.region = region
        self.prefix = prefix.strip('/')
        self.unscoped_segment = unscoped_segment

    @classmethod
    def from_config(cls, config: EncodingConfig) -> "OutputResolver":
        return cls(
            bucket=config.output_bucket,
            region=config.s3_region,
            prefix=config.output_prefix,
            unscoped_segment=config.unscoped_segment,
        )

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def object_key(self, asset_id: str, scope_id: Optional[str], target_resolution: int) -> str:
        """Key of the transcoded file inside the output bucket."""
        self._check_resolution(target_resolution)
        return f"{self._base_key(asset_id, scope_id)}-{target_resolution}p.mp4"

    def resolve(self, asset_id: str, scope_id: Optional[str], target_resolution: int) -> str:
        """
        Public HTTPS location of the transcoded media.

        Raises:
            ContractViolationError: On empty identifiers, identifiers
                containing '/', or a non-positive resolution
        """
        key = self.object_key(asset_id, scope_id, target_resolution)
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def destination(self, asset_id: str, scope_id: Optional[str]) -> str:
        """
        Destination base handed to the transcoding service.

        The service appends the profile's name modifier and the container
        extension, producing the key returned by object_key().
        """
        return f"s3://{self.bucket}/{self._base_key(asset_id, scope_id)}"

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _base_key(self, asset_id: str, scope_id: Optional[str]) -> str:
        self._check_segment("asset_id", asset_id)
        if scope_id is None:
            scope_segment = self.unscoped_segment
        else:
            self._check_segment("scope_id", scope_id)
            scope_segment = scope_id

        if self.prefix:
            return f"{self.prefix}/{scope_segment}/{asset_id}"
        return f"{scope_segment}/{asset_id}"

    @staticmethod
    def _check_segment(name: str, value) -> None:
        if not isinstance(value, str):
            raise ContractViolationError(f"{name} must be str, got {type(value).__name__}")
        if not value.strip():
            raise ContractViolationError(f"{name} must not be empty")
        if '/' in value:
            raise ContractViolationError(f"{name} must not contain '/': {value!r}")

    @staticmethod
    def _check_resolution(target_resolution) -> None:
        if isinstance(target_resolution, bool) or not isinstance(target_resolution, int):
            raise ContractViolationError(
                f"target_resolution must be int, got {type(target_resolution).__name__}"
            )
        if target_resolution <= 0:
            raise ContractViolationError(f"target_resolution must be positive, got {target_resolution}")
