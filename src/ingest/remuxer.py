"""Fast-start remuxing with ffmpeg."""
from pathlib import Path

from src.core.exceptions import RemuxError, ToolInvocationError
from src.core.logging import get_logger
from src.ingest.toolkit import MediaToolkit

logger = get_logger(__name__)

PROCESSING_SUFFIX = ".processing"


def processing_path(input_path: Path) -> Path:
    """Derive the remux output path, ``<input>.processing``."""
    return input_path.with_name(input_path.name + PROCESSING_SUFFIX)


class FastStartRemuxer:
    """Moves the MP4 index (moov atom) ahead of the media data.

    Streams are copied, never re-encoded. The input file is left in
    place; the caller owns both files afterwards.

    Example:
        remuxer = FastStartRemuxer(SubprocessToolkit())
        output_path = await remuxer.remux(Path("/tmp/upload.mp4"))
    """

    def __init__(self, toolkit: MediaToolkit, ffmpeg_bin: str = "ffmpeg") -> None:
        self.toolkit = toolkit
        self.ffmpeg_bin = ffmpeg_bin

    def build_command(self, input_path: Path, output_path: Path) -> list[str]:
        return [
            self.ffmpeg_bin,
            "-i", str(input_path),
            "-c", "copy",
            "-movflags", "faststart",
            "-f", "mp4",
            str(output_path),
        ]

    async def remux(self, input_path: Path) -> Path:
        """Write a fast-start copy of ``input_path``.

        Returns:
            Path of the remuxed file

        Raises:
            RemuxError: If ffmpeg cannot run or exits non-zero
        """
        output_path = processing_path(input_path)

        logger.info("Remuxing for fast start", input=str(input_path), output=str(output_path))

        try:
            result = await self.toolkit.run(self.build_command(input_path, output_path))
        except ToolInvocationError as e:
            raise RemuxError(
                f"ffmpeg could not run: {e.message}",
                details={"reason": "invocation", **e.details},
            ) from e

        if not result.ok:
            stderr = result.stderr_tail()
            logger.error("FFmpeg failed", returncode=result.returncode, stderr=stderr)
            raise RemuxError(
                "Unable to process video for fast start",
                details={"returncode": result.returncode, "stderr": stderr},
            )

        return output_path
