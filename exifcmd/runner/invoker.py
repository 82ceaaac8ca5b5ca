"""Running composed exiftool commands as child processes."""

import json
import logging
import os
import selectors
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

from exifcmd.config import InvokerConfig
from exifcmd.errors import ProcessExecutionError, ProcessSpawnError, errno_name


logger = logging.getLogger(__name__)

STRATEGIES = ("exec", "spawn")

CHUNK_SIZE = 64 * 1024

# Exit codes the shell uses when it cannot run the command itself.
SHELL_CANNOT_EXECUTE = 126
SHELL_NOT_FOUND = 127


@dataclass
class ExecutionResult:
    """Output of one exiftool run."""

    stdout: str
    stderr: str
    exit_code: int
    command: str


def parse_diagnostics(stderr: str) -> object:
    """Return stderr as JSON when exiftool emitted JSON, else the stripped text."""
    text = stderr.strip()
    if text.startswith(("[", "{")):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass
    return text


class ProcessInvoker:
    """Runs an argv through the shell using the configured strategy.

    ``exec`` buffers all output and enforces the max buffer size; ``spawn``
    reads stdout and stderr as the chunks arrive. Both resolve only once the
    process has exited. There is no timeout.
    """

    def __init__(self, config: InvokerConfig | None = None) -> None:
        self.config = config or InvokerConfig()
        if self.config.strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown strategy: {self.config.strategy}. Available: {list(STRATEGIES)}"
            )

    def run(self, argv: Sequence[str]) -> ExecutionResult:
        command = " ".join(argv)
        logger.debug("running: %s", command)

        try:
            if self.config.strategy == "spawn":
                result = self._spawn(command)
            else:
                result = self._exec(command)
        except OSError as e:
            raise ProcessSpawnError(
                f"Could not start process: {e}", command=command, error_code=errno_name(e)
            ) from e

        self._check(result)
        return result

    def _exec(self, command: str) -> ExecutionResult:
        completed = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            check=False,
        )
        stdout = completed.stdout or b""
        stderr = completed.stderr or b""
        if len(stdout) > self.config.max_buffer or len(stderr) > self.config.max_buffer:
            raise ProcessExecutionError(
                f"stdout maxBuffer length exceeded ({self.config.max_buffer} bytes)",
                command=command,
                exit_code=completed.returncode,
            )
        return ExecutionResult(
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            exit_code=completed.returncode,
            command=command,
        )

    def _spawn(self, command: str) -> ExecutionResult:
        with subprocess.Popen(
            command,
            shell=True,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        ) as proc:
            out_fd = proc.stdout.fileno()  # type: ignore[union-attr]
            err_fd = proc.stderr.fileno()  # type: ignore[union-attr]
            chunks: dict[int, list[bytes]] = {out_fd: [], err_fd: []}
            with selectors.DefaultSelector() as selector:
                selector.register(proc.stdout, selectors.EVENT_READ)
                selector.register(proc.stderr, selectors.EVENT_READ)
                while selector.get_map():
                    for key, _ in selector.select():
                        fd = key.fileobj.fileno()  # type: ignore[union-attr]
                        data = os.read(fd, CHUNK_SIZE)
                        if not data:
                            selector.unregister(key.fileobj)
                            continue
                        chunks[fd].append(data)
            exit_code = proc.wait()

        return ExecutionResult(
            stdout=_decode(b"".join(chunks[out_fd])),
            stderr=_decode(b"".join(chunks[err_fd])),
            exit_code=exit_code,
            command=command,
        )

    def _check(self, result: ExecutionResult) -> None:
        if result.exit_code == 0:
            return
        if result.exit_code in (SHELL_CANNOT_EXECUTE, SHELL_NOT_FOUND):
            code = "EACCES" if result.exit_code == SHELL_CANNOT_EXECUTE else "ENOENT"
            raise ProcessSpawnError(
                f"Could not start process: {result.stderr.strip()}",
                command=result.command,
                error_code=code,
            )
        raise ProcessExecutionError(
            f"exiftool exited with code {result.exit_code}: {result.stderr.strip()}",
            command=result.command,
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
            diagnostics=parse_diagnostics(result.stderr),
        )


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")
