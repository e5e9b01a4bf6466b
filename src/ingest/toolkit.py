"""External media tool execution."""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.core.exceptions import ToolInvocationError, ToolTimeoutError
from src.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """Captured outcome of one tool run."""

    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def stderr_tail(self, limit: int = 500) -> str:
        return self.stderr[-limit:].decode("utf-8", errors="replace")


class MediaToolkit(ABC):
    """Runs external media tools (ffprobe, ffmpeg).

    Communication is limited to argv, exit status and captured output.
    """

    @abstractmethod
    async def run(self, args: list[str]) -> ToolResult:
        """Run a tool to completion.

        Args:
            args: Full argv, binary first

        Returns:
            ToolResult, whatever the exit status

        Raises:
            ToolInvocationError: If the process could not be started
            ToolTimeoutError: If the process had to be killed
        """
        ...


class SubprocessToolkit(MediaToolkit):
    """Spawns real processes with a bounded wait.

    Example:
        toolkit = SubprocessToolkit(timeout=60)
        result = await toolkit.run(["ffprobe", "-version"])
    """

    def __init__(self, timeout: float = 120.0) -> None:
        self.timeout = timeout

    async def run(self, args: list[str]) -> ToolResult:
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Media tool could not be started", tool=args[0], error=str(e))
            raise ToolInvocationError(
                f"Could not start {args[0]}: {e}",
                details={"tool": args[0]},
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.error("Media tool timed out", tool=args[0], timeout=self.timeout)
            raise ToolTimeoutError(
                f"{args[0]} exceeded {self.timeout}s",
                details={"tool": args[0], "timeout": self.timeout},
            )
        except asyncio.CancelledError:
            # Client went away; don't leave the tool running.
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        return ToolResult(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout,
            stderr=stderr,
        )
