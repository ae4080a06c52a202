"""Run the external encoder and collect its exit status and output."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Optional

from .errors import EncoderTimeoutError, ProcessLaunchError
from .models import EncoderInvocation, ProcessOutcome

logger = logging.getLogger(__name__)


def _decode(raw: Optional[bytes]) -> str:
    return (raw or b"").decode("utf-8", "replace")


class ProcessSupervisor:
    """Launches one encoder per call.

    stdout and stderr are drained by ``communicate()`` while the child runs so
    a chatty encoder never blocks on a full pipe. Only the awaiting task is
    suspended. When ``max_concurrent`` is positive, runs beyond that number
    wait for a free slot before launching.
    """

    def __init__(self, timeout: Optional[float] = None, max_concurrent: int = 0) -> None:
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        self._gate: Optional[asyncio.Semaphore] = None

    @contextlib.asynccontextmanager
    async def _slot(self) -> AsyncIterator[None]:
        if self.max_concurrent <= 0:
            yield
            return
        # Created lazily so it binds to the running loop.
        if self._gate is None:
            self._gate = asyncio.Semaphore(self.max_concurrent)
        async with self._gate:
            yield

    async def run(self, invocation: EncoderInvocation) -> ProcessOutcome:
        async with self._slot():
            return await self._run(invocation)

    async def _run(self, invocation: EncoderInvocation) -> ProcessOutcome:
        argv = invocation.argv
        logger.debug("Launching encoder: %s", argv)
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.error("Failed to launch %s: %s", invocation.executable_path, exc)
            raise ProcessLaunchError(str(exc)) from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            # the child may have exited after the deadline
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            logger.error("Encoder timed out after %s seconds: %s", self.timeout, argv)
            raise EncoderTimeoutError(self.timeout or 0) from None

        outcome = ProcessOutcome(
            exit_code=proc.returncode if proc.returncode is not None else -1,
            captured_stderr=_decode(stderr),
            captured_stdout=_decode(stdout),
        )
        if outcome.succeeded:
            logger.info("FFmpeg process completed successfully")
        else:
            logger.warning("FFmpeg exited with code %s", outcome.exit_code)
        return outcome
