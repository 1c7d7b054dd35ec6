"""Runs one external process and reduces it to an OperationResult."""

import asyncio
from collections import deque
from collections.abc import AsyncIterator, Sequence
from pathlib import Path
from typing import Any, Protocol

from phettest.logger import get_logger
from phettest.models.command import SPAWN_FAILURE_EXIT_CODE, CommandFailure, CommandSuccess, OperationResult

logger = get_logger(__name__)

READ_CHUNK_SIZE = 65536


class Runner(Protocol):
    """Anything that can run a command the way CommandRunner does."""

    async def run(self, command: str, args: Sequence[str], cwd: Path) -> OperationResult: ...


async def iter_process_lines(
    process: asyncio.subprocess.Process,
    encoding: str = "utf-8",
    errors: str = "replace",
) -> AsyncIterator[tuple[str, str]]:
    """
    Async generator that yields (line, source) tuples from a running process.

    Yields:
        Tuple[line, source] where source is 'stdout' or 'stderr'.

    Notes:
        - Lines are yielded in the order they arrive across both streams.
        - The generator finishes once both streams reach EOF; it does not wait
          for the process to exit.
    """
    # Use a sentinel to signal reader completion to avoid deadlocks
    sentinel = object()
    queue: asyncio.Queue[tuple[str, str] | object] = asyncio.Queue()

    def _decode(raw: bytes) -> str:
        return raw.decode(encoding, errors=errors).rstrip("\r")

    async def _reader(stream: asyncio.StreamReader, source: str) -> None:
        # Fixed-size reads, not readline: a line longer than the stream limit must
        # not stop the pipe from being drained
        pending = b""
        try:
            while chunk := await stream.read(READ_CHUNK_SIZE):
                pending += chunk
                *complete, pending = pending.split(b"\n")
                for raw in complete:
                    await queue.put((_decode(raw), source))
            if pending:
                await queue.put((_decode(pending), source))
        except Exception as e:
            logger.error("Error reading from subprocess", source=source, error=str(e))
        finally:
            await queue.put(sentinel)

    readers: list[asyncio.Task[Any]] = []
    if process.stdout:
        readers.append(asyncio.create_task(_reader(process.stdout, "stdout")))
    if process.stderr:
        readers.append(asyncio.create_task(_reader(process.stderr, "stderr")))

    active_readers = len(readers)
    try:
        while active_readers > 0:
            item = await queue.get()
            if item is sentinel:
                active_readers -= 1
            else:
                yield item  # type: ignore
        if readers:
            await asyncio.gather(*readers, return_exceptions=True)
    finally:
        for t in readers:
            if not t.done():
                t.cancel()


class CommandRunner:
    """Spawns processes without a shell, each with an explicit working directory.

    The working directory is handed to the child process directly, so concurrent
    runs against different repositories never depend on the server's own cwd.
    """

    def __init__(self, diagnostic_lines: int = 20) -> None:
        self.diagnostic_lines = diagnostic_lines

    async def run(self, command: str, args: Sequence[str], cwd: Path) -> OperationResult:
        """
        Run ``command`` with ``args`` in ``cwd`` and wait for it to exit.

        Output is streamed line by line to the debug log while the process runs.

        Args:
            command: Executable name or path
            args: Argument tokens, passed through verbatim
            cwd: Working directory for the child process

        Returns:
            CommandSuccess with the captured stdout on exit code 0, otherwise
            CommandFailure with the exit code and the tail of the output. A process
            that cannot be started yields CommandFailure with SPAWN_FAILURE_EXIT_CODE.
        """
        cmd_str = " ".join([command, *args])
        logger.info("Running command", command=cmd_str, cwd=str(cwd))

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd),
            )
        except OSError as e:
            # Missing binary or missing working directory
            logger.error("Failed to start command", command=cmd_str, cwd=str(cwd), error=str(e))
            return CommandFailure(
                exit_code=SPAWN_FAILURE_EXIT_CODE,
                diagnostic=f"failed to start {command}: {e}",
            )

        stdout_lines: list[str] = []
        tail: deque[str] = deque(maxlen=self.diagnostic_lines)

        async for line, source in iter_process_lines(process):
            logger.debug(f"{source}: {line}", command=command, cwd=str(cwd))
            if source == "stdout":
                stdout_lines.append(line)
            tail.append(line)

        returncode = await process.wait()
        logger.info("Finished command", command=cmd_str, cwd=str(cwd), exit_code=returncode)

        if returncode != 0:
            return CommandFailure(exit_code=returncode, diagnostic="\n".join(tail))
        return CommandSuccess(output="\n".join(stdout_lines))
