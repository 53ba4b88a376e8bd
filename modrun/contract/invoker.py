"""Plugin process launching and output capture."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections.abc import Iterable
from pathlib import Path

from .environment import build_environment
from .errors import LaunchError
from .models import InvocationRequest, RawOutput

logger = logging.getLogger(__name__)

_POSIX = os.name == "posix"


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill the plugin and everything it spawned, then reap it.

    The group is killed even when the leader has already exited: a
    background child can outlive it while still holding the output pipes.
    """

    try:
        if _POSIX:
            os.killpg(proc.pid, signal.SIGKILL)
        elif proc.returncode is None:
            proc.kill()
    except (ProcessLookupError, PermissionError):
        pass
    await proc.wait()


class PluginInvoker:
    """Runs ``<plugin> <argument-file>`` and captures what it prints.

    The executable is started directly (never through a shell) with stdin
    closed, stdout and stderr on separate pipes, and an environment built
    from an explicit passthrough list. On POSIX the plugin gets its own
    session so a timeout can kill the whole process group.
    """

    def __init__(
        self,
        env_passthrough: Iterable[str] = ("PATH",),
        default_timeout: float | None = None,
    ) -> None:
        self.env_passthrough = tuple(env_passthrough)
        self.default_timeout = default_timeout

    def effective_timeout(self, request: InvocationRequest) -> float | None:
        return request.timeout if request.timeout is not None else self.default_timeout

    async def invoke(self, request: InvocationRequest, argument_path: Path) -> RawOutput:
        """Run the plugin to completion or until its timeout expires.

        Raises:
            LaunchError: If the executable cannot be started.
        """

        executable = os.fspath(request.plugin_path.absolute())
        env = build_environment(self.env_passthrough, request.env)
        timeout = self.effective_timeout(request)

        try:
            proc = await asyncio.create_subprocess_exec(
                executable,
                os.fspath(argument_path),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
                start_new_session=_POSIX,
            )
        except OSError as exc:
            raise LaunchError(f"Cannot start plugin {executable}: {exc}") from exc

        logger.debug(
            "plugin_process_started",
            extra={"pid": proc.pid, "plugin": executable, "invocation_id": request.invocation_id},
        )

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            await _terminate(proc)
            logger.warning(
                "plugin_invocation_timeout",
                extra={
                    "plugin": executable,
                    "timeout": timeout,
                    "invocation_id": request.invocation_id,
                },
            )
            return RawOutput(exit_code=None, timed_out=True)
        except BaseException:
            # Cancelled or failed while waiting; never leave the child behind.
            await _terminate(proc)
            raise

        return RawOutput(stdout=stdout or b"", stderr=stderr or b"", exit_code=proc.returncode)
