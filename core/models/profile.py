"""
Target Encoding Profile.

Describes the browser-compatible rendition the orchestrator asks the
transcoding service to produce. Width is derived from the height at 16:9
and rounded up to an even number (H.264 needs even dimensions), so the
default 480p profile is 854x480.

Exports:
    TargetProfile: Output encoding parameters
"""

from pydantic import BaseModel, ConfigDict, Field

from config.defaults import ProfileDefaults


class TargetProfile(BaseModel):
    """Output encoding parameters for one target resolution."""

    model_config = ConfigDict(frozen=True)

    height: int = Field(default=ProfileDefaults.TARGET_HEIGHT, ge=144, le=2160)
    aspect_width: int = Field(default=ProfileDefaults.ASPECT_WIDTH, ge=1)
    aspect_height: int = Field(default=ProfileDefaults.ASPECT_HEIGHT, ge=1)

    video_max_bitrate: int = Field(default=ProfileDefaults.VIDEO_MAX_BITRATE, ge=1000)
    qvbr_quality_level: int = Field(default=ProfileDefaults.QVBR_QUALITY_LEVEL, ge=1, le=10)
    gop_size_frames: int = Field(default=ProfileDefaults.GOP_SIZE_FRAMES, ge=1)

    audio_bitrate: int = Field(default=ProfileDefaults.AUDIO_BITRATE, ge=6000)
    audio_sample_rate: int = Field(default=ProfileDefaults.AUDIO_SAMPLE_RATE)

    container: str = Field(default=ProfileDefaults.CONTAINER)
    codec: str = Field(default=ProfileDefaults.CODEC)

    @property
    def width(self) -> int:
        raw = round(self.height * self.aspect_width / self.aspect_height)
        return raw + (raw % 2)

    @property
    def resolution_label(self) -> str:
        return f"{self.height}p"

    @property
    def name_modifier(self) -> str:
        """Suffix the transcoding service appends to the output base name."""
        return f"-{self.resolution_label}"

    @classmethod
    def for_resolution(cls, height: int) -> "TargetProfile":
        """
        Build the standard profile for an output height.

        720p and above get the higher bitrate ceiling.
        """
        bitrate = (
            ProfileDefaults.VIDEO_MAX_BITRATE_HD if height >= 720
            else ProfileDefaults.VIDEO_MAX_BITRATE
        )
        return cls(height=height, video_max_bitrate=bitrate)


__all__ = ['TargetProfile']
