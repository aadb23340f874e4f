"""
Encoding Service Configuration.

AWS Elemental MediaConvert account settings and the output bucket layout
used to compute transcoded media locations.

Environment Variables:
    AWS_REGION: MediaConvert region (default us-east-1)
    AWS_S3_REGION: Region of the output bucket (default AWS_REGION)
    AWS_S3_OUTPUT_BUCKET: Output bucket (default video-analysis-transcoded)
    AWS_MEDIACONVERT_ROLE: IAM role ARN MediaConvert assumes (required to submit)
    AWS_MEDIACONVERT_ENDPOINT: Account endpoint (discovered when unset)
    AWS_MEDIACONVERT_QUEUE: Queue ARN or name (MediaConvert default queue when unset)
    TRANSCODE_OUTPUT_PREFIX: Key prefix for outputs (default transcoded/pool)

Exports:
    EncodingConfig: MediaConvert and output layout configuration
"""

import os
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from exceptions import ConfigurationError
from .defaults import EncodingDefaults


class EncodingConfig(BaseModel):
    """MediaConvert account and output bucket configuration."""

    model_config = ConfigDict(frozen=True)

    region: str = Field(
        default=EncodingDefaults.REGION,
        description="AWS region hosting MediaConvert"
    )

    s3_region: str = Field(
        default=EncodingDefaults.REGION,
        description="AWS region of the output bucket (used in public URLs)"
    )

    output_bucket: str = Field(
        default=EncodingDefaults.OUTPUT_BUCKET,
        min_length=3,
        description="S3 bucket receiving transcoded outputs"
    )

    output_prefix: str = Field(
        default=EncodingDefaults.OUTPUT_PREFIX,
        description="Key prefix for transcoded outputs, without leading or trailing slash"
    )

    unscoped_segment: str = Field(
        default=EncodingDefaults.UNSCOPED_SEGMENT,
        min_length=1,
        description="Path segment used for assets without a project"
    )

    role_arn: Optional[str] = Field(
        default=None,
        description="IAM role ARN passed to MediaConvert CreateJob"
    )

    endpoint_url: Optional[str] = Field(
        default=None,
        description="Account-specific MediaConvert endpoint; discovered via DescribeEndpoints when unset"
    )

    queue: Optional[str] = Field(
        default=None,
        description="MediaConvert queue ARN or name"
    )

    @field_validator('output_prefix')
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        return v.strip('/')

    def require_role_arn(self) -> str:
        """
        Return the role ARN or fail fast.

        Raises:
            ConfigurationError: If AWS_MEDIACONVERT_ROLE is not set
        """
        if not self.role_arn:
            raise ConfigurationError(
                "AWS_MEDIACONVERT_ROLE environment variable not set - "
                "MediaConvert jobs cannot be created"
            )
        return self.role_arn

    def debug_dict(self) -> dict:
        """Debug-friendly representation."""
        return {
            'region': self.region,
            's3_region': self.s3_region,
            'output_bucket': self.output_bucket,
            'output_prefix': self.output_prefix,
            'unscoped_segment': self.unscoped_segment,
            'role_arn_set': bool(self.role_arn),
            'endpoint_url': self.endpoint_url,
            'queue': self.queue,
        }

    @classmethod
    def from_environment(cls) -> "EncodingConfig":
        """Load from environment variables."""
        region = os.environ.get("AWS_REGION", EncodingDefaults.REGION)
        try:
            return cls(
                region=region,
                s3_region=os.environ.get("AWS_S3_REGION", region),
                output_bucket=os.environ.get("AWS_S3_OUTPUT_BUCKET", EncodingDefaults.OUTPUT_BUCKET),
                output_prefix=os.environ.get("TRANSCODE_OUTPUT_PREFIX", EncodingDefaults.OUTPUT_PREFIX),
                unscoped_segment=os.environ.get("TRANSCODE_UNSCOPED_SEGMENT", EncodingDefaults.UNSCOPED_SEGMENT),
                role_arn=os.environ.get("AWS_MEDIACONVERT_ROLE") or None,
                endpoint_url=os.environ.get("AWS_MEDIACONVERT_ENDPOINT") or None,
                queue=os.environ.get("AWS_MEDIACONVERT_QUEUE") or None,
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid encoding configuration: {e}") from e
