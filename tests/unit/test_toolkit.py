"""Tests for subprocess tool execution."""
import sys

import pytest

from src.core.exceptions import ToolInvocationError, ToolTimeoutError
from src.ingest.toolkit import SubprocessToolkit


class TestSubprocessToolkit:
    """Test cases for SubprocessToolkit."""

    async def test_captures_output(self) -> None:
        result = await SubprocessToolkit().run(
            [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr)"]
        )

        assert result.ok
        assert result.stdout.strip() == b"out"
        assert result.stderr.strip() == b"err"

    async def test_non_zero_exit_is_returned(self) -> None:
        result = await SubprocessToolkit().run([sys.executable, "-c", "raise SystemExit(3)"])

        assert not result.ok
        assert result.returncode == 3

    async def test_missing_binary(self) -> None:
        with pytest.raises(ToolInvocationError):
            await SubprocessToolkit().run(["/nonexistent/ffprobe", "-version"])

    async def test_hung_tool_is_killed(self) -> None:
        toolkit = SubprocessToolkit(timeout=0.5)

        with pytest.raises(ToolTimeoutError) as exc_info:
            await toolkit.run([sys.executable, "-c", "import time; time.sleep(30)"])
        assert exc_info.value.details["timeout"] == 0.5
