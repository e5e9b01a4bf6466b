"""Container-level media probing with ffprobe."""
import json
from pathlib import Path
from typing import Any

from src.core.exceptions import ProbeError, ToolInvocationError
from src.core.logging import get_logger
from src.core.models import VideoGeometry
from src.ingest.toolkit import MediaToolkit

logger = get_logger(__name__)


class MediaProber:
    """Reads primary video stream geometry from a staged file.

    The exit status of ffprobe is not trusted on its own: a failing probe
    can exit cleanly with nothing on stdout, so the parsed payload is
    always validated.

    Example:
        prober = MediaProber(SubprocessToolkit())
        geometry = await prober.probe(Path("/tmp/upload.mp4"))
    """

    def __init__(self, toolkit: MediaToolkit, ffprobe_bin: str = "ffprobe") -> None:
        self.toolkit = toolkit
        self.ffprobe_bin = ffprobe_bin

    def build_command(self, path: Path) -> list[str]:
        return [
            self.ffprobe_bin,
            "-v", "error",
            "-print_format", "json",
            "-show_streams",
            str(path),
        ]

    async def probe(self, path: Path) -> VideoGeometry:
        """Probe a file for its video dimensions.

        Raises:
            ProbeError: If ffprobe cannot run or its output is unusable
        """
        try:
            result = await self.toolkit.run(self.build_command(path))
        except ToolInvocationError as e:
            raise ProbeError(
                f"ffprobe could not run: {e.message}",
                details={"reason": "invocation", **e.details},
            ) from e

        if not result.ok:
            logger.warning(
                "ffprobe exited non-zero",
                path=str(path),
                returncode=result.returncode,
                stderr=result.stderr_tail(),
            )

        geometry = self._parse(result.stdout, result.returncode)
        logger.debug(
            "Probed video",
            path=str(path),
            width=geometry.width,
            height=geometry.height,
        )
        return geometry

    def _parse(self, stdout: bytes, returncode: int) -> VideoGeometry:
        try:
            payload = json.loads(stdout)
        except (ValueError, UnicodeDecodeError) as e:
            raise ProbeError(
                "ffprobe output is not valid JSON",
                details={"reason": "output", "returncode": returncode},
            ) from e

        streams = payload.get("streams") if isinstance(payload, dict) else None
        if not streams or not isinstance(streams, list):
            raise ProbeError(
                "No streams available",
                details={"reason": "output", "returncode": returncode},
            )

        stream = self._primary_stream(streams)
        width = self._dimension(stream, "width")
        height = self._dimension(stream, "height")
        if width == 0 or height == 0:
            raise ProbeError(
                "Resolution cannot be 0",
                details={"reason": "output", "width": width, "height": height},
            )
        return VideoGeometry(width=width, height=height)

    @staticmethod
    def _primary_stream(streams: list[dict[str, Any]]) -> dict[str, Any]:
        for stream in streams:
            if isinstance(stream, dict) and stream.get("codec_type") == "video":
                return stream
        first = streams[0]
        return first if isinstance(first, dict) else {}

    @staticmethod
    def _dimension(stream: dict[str, Any], name: str) -> int:
        value = stream.get(name) or 0
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0
