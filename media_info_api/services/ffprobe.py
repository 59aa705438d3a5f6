import asyncio
import json
import re
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import List, NamedTuple, Optional

from pydantic import ValidationError

from media_info_api.config.settings import config
from media_info_api.core.context import RequestContext
from media_info_api.core.errors import MalformedProbeOutputError, ProbeError
from media_info_api.core.logging import log_info
from media_info_api.i18n import i18n
from media_info_api.models.probe import RawProbeOutput

COMMAND_NOT_FOUND = 127
NOT_EXECUTABLE = 126

NOT_FOUND_MARKERS = ("no such file or directory", "not found")
DIAGNOSTIC_LINE = re.compile(r'(error|fail|invalid|corrupt|no such file|unable to open)', re.IGNORECASE)


class CompletedProcess(NamedTuple):
    """Subprocess result, stdout and stderr combined"""
    returncode: int
    output: bytes

    @property
    def text(self) -> str:
        return self.output.decode("utf-8", errors="replace")


class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def run(cmd: List[str], timeout: Optional[float] = None) -> CompletedProcess:
        """
        Run subprocess and wait for it to exit.
        The child is killed if the wait times out or the calling task is cancelled.
        """
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            stdin=asyncio.subprocess.DEVNULL
        )

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
            return CompletedProcess(returncode=process.returncode, output=stdout or b"")
        except (Exception, asyncio.CancelledError):
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise


class FFprobeCommandBuilder:
    """Build ffprobe argument vectors"""

    @staticmethod
    def build_probe_command(ffprobe_path: str, media_path: Path) -> List[str]:
        """Quiet JSON report of the container format and every stream"""
        return [
            ffprobe_path,
            '-v', 'quiet',
            '-print_format', 'json',
            '-show_format',
            '-show_streams',
            str(media_path),
        ]

    @staticmethod
    def build_version_command(ffprobe_path: str) -> List[str]:
        return [ffprobe_path, '-version']


@dataclass(frozen=True)
class ProbeDiagnosis:
    """Best-effort explanation of a failed ffprobe run"""
    exit_code: int
    tool_path: str
    command_not_found: bool = False
    potential_cause: Optional[str] = None
    last_line: Optional[str] = None

    @property
    def message(self) -> str:
        if self.command_not_found:
            message = f"FFprobe execution failed: Command not found. Path used: '{self.tool_path}'."
        else:
            message = f"FFprobe failed with exit code {self.exit_code}."
        if self.potential_cause:
            message += f" Potential cause: {self.potential_cause}"
        if self.last_line:
            message += f" Last line of output: {self.last_line}"
        return message


def explain_probe_failure(exit_code: int, output: str, tool_path: str) -> ProbeDiagnosis:
    lines = [line.strip() for line in output.splitlines()]
    lowered = output.lower()

    looks_missing = exit_code == COMMAND_NOT_FOUND or any(m in lowered for m in NOT_FOUND_MARKERS)
    command_not_found = looks_missing and tool_path.lower() in lowered

    potential_cause = next((line for line in lines if DIAGNOSTIC_LINE.search(line)), None)
    non_empty = [line for line in lines if line]

    return ProbeDiagnosis(
        exit_code=exit_code,
        tool_path=tool_path,
        command_not_found=command_not_found,
        potential_cause=potential_cause,
        last_line=non_empty[-1] if non_empty else None,
    )


def parse_probe_output(text: str) -> RawProbeOutput:
    """Decode the report of a successful run; raises MalformedProbeOutputError"""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedProbeOutputError(e.msg, text) from e

    if not isinstance(document, dict):
        raise MalformedProbeOutputError("top-level value is not an object", text)

    try:
        return RawProbeOutput.from_document(document)
    except ValidationError as e:
        raise MalformedProbeOutputError(f"unexpected structure ({e.error_count()} errors)", text) from e


class MediaProber:
    """Run ffprobe against local files"""

    def __init__(self, ffprobe_path: Optional[str] = None):
        self.ffprobe_path = ffprobe_path or config.probe.ffprobe_path

    async def probe(self, media_path: Path, ctx: RequestContext) -> str:
        """Return the raw JSON report; raises ProbeError on a non-zero exit"""
        cmd = FFprobeCommandBuilder.build_probe_command(self.ffprobe_path, media_path)
        command = shlex.join(cmd)
        await log_info(ctx, i18n.get("log.probing", command=command))

        result = await self.execute(cmd)
        output = result.text

        if result.returncode != 0:
            diagnosis = explain_probe_failure(result.returncode, output, self.ffprobe_path)
            raise ProbeError(diagnosis, command=command, output=output)

        return output

    async def version(self) -> CompletedProcess:
        cmd = FFprobeCommandBuilder.build_version_command(self.ffprobe_path)
        try:
            return await self.execute(cmd, timeout=config.probe.version_check_timeout)
        except asyncio.TimeoutError:
            return CompletedProcess(returncode=-1, output=b"")

    @staticmethod
    async def execute(cmd: List[str], timeout: Optional[float] = None) -> CompletedProcess:
        """Run ``cmd``; a missing or non-executable binary is reported like a shell would"""
        try:
            return await SubprocessExecutor.run(cmd, timeout=timeout)
        except FileNotFoundError:
            return CompletedProcess(COMMAND_NOT_FOUND, f"{cmd[0]}: No such file or directory".encode())
        except PermissionError:
            return CompletedProcess(NOT_EXECUTABLE, f"{cmd[0]}: Permission denied".encode())
