"""Lifecycle manager for the local OpenCode server used by the AI chat.

Spawns ``opencode serve`` on a free localhost port, waits until it answers
HTTP, streams its output into the log and shuts it down (SIGTERM, then
SIGKILL) when asked or when the RPM server exits.
"""

from __future__ import annotations

import asyncio
import os
import random
import shutil
import socket
from contextlib import suppress
from dataclasses import dataclass

import httpx
import structlog

from prmanager.settings import settings

logger = structlog.get_logger(__name__)

LOCALHOST = "127.0.0.1"
PORT_RANGE = (4096, 8191)
PORT_ATTEMPTS = 10
READY_POLL_INTERVAL = 0.5
GRACEFUL_SHUTDOWN_SECONDS = 2.0

# Blank out gcloud credential discovery so the server does not pick up
# unrelated Google credentials from the user's shell.
_SCRUBBED_ENV = {"GOOGLE_APPLICATION_CREDENTIALS": "", "CLOUDSDK_CONFIG": ""}


class OpencodeServiceError(Exception):
    """OpenCode could not be started or reached; ``code`` is stable for API clients."""

    def __init__(self, message: str, code: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


@dataclass(frozen=True)
class ServerStatus:
    running: bool
    url: str | None
    port: int | None
    repo_path: str | None


def is_port_available(port: int, host: str = LOCALHOST) -> bool:
    """Return True if ``host:port`` can be bound right now."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_available_port(attempts: int = PORT_ATTEMPTS, host: str = LOCALHOST) -> int:
    """Pick a random free port in ``PORT_RANGE``.

    Raises:
        OpencodeServiceError: ``NO_PORT`` when every attempt hit a busy port.
    """
    low, high = PORT_RANGE
    for _ in range(attempts):
        port = random.randint(low, high)
        if is_port_available(port, host):
            return port
    raise OpencodeServiceError(
        f"Could not find available port after {attempts} attempts",
        "NO_PORT",
        f"All attempted ports in range {low}-{high} were in use",
    )


class OpencodeManager:
    """Owns at most one ``opencode serve`` process."""

    def __init__(
        self,
        binary: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._binary = binary
        self._transport = transport
        self._process: asyncio.subprocess.Process | None = None
        self._url: str | None = None
        self._port: int | None = None
        self._repo_path: str | None = None
        self._tasks: list[asyncio.Task] = []
        self._lock = asyncio.Lock()

    @property
    def binary(self) -> str:
        return self._binary or settings.opencode_bin()

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    def is_installed(self) -> bool:
        return shutil.which(self.binary) is not None

    async def get_version(self) -> str | None:
        """Return ``opencode --version`` output, or None if it cannot be run."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary,
                "--version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=5.0)
        except (OSError, asyncio.TimeoutError):
            return None
        if proc.returncode != 0:
            return None
        return stdout.decode("utf-8", errors="replace").strip() or None

    def status(self) -> ServerStatus:
        return ServerStatus(
            running=self.is_running,
            url=self._url,
            port=self._port,
            repo_path=self._repo_path,
        )

    async def start_server(self, repo_path: str) -> str:
        """Start ``opencode serve`` for ``repo_path`` and return its base URL.

        Returns the existing URL when a server is already running. Any failure
        leaves no process behind.

        Raises:
            OpencodeServiceError: ``NOT_INSTALLED``, ``NO_PORT``, ``NOT_FOUND``,
                ``STARTUP_TIMEOUT`` or ``STARTUP_FAILED``.
        """
        async with self._lock:
            if self.is_running and self._url:
                return self._url

            if not self.is_installed():
                raise OpencodeServiceError(
                    "OpenCode CLI not found. This feature requires OpenCode to be installed.",
                    "NOT_INSTALLED",
                    "Install from https://opencode.ai",
                )

            try:
                return await self._spawn(repo_path)
            except OpencodeServiceError:
                await self._shutdown()
                raise
            except FileNotFoundError as exc:
                await self._shutdown()
                raise OpencodeServiceError(
                    "OpenCode executable not found",
                    "NOT_FOUND",
                    "Make sure OpenCode is installed and in your PATH",
                ) from exc
            except Exception as exc:
                await self._shutdown()
                logger.exception("OpenCode server failed to start")
                raise OpencodeServiceError(
                    f"Failed to start OpenCode server: {exc}", "STARTUP_FAILED"
                ) from exc

    async def _spawn(self, repo_path: str) -> str:
        port = find_available_port()
        args = [self.binary, "serve", "--port", str(port), "--hostname", LOCALHOST]
        logger.info("Starting OpenCode server", args=args, cwd=repo_path)

        proc = await asyncio.create_subprocess_exec(
            *args,
            cwd=repo_path,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, **_SCRUBBED_ENV},
        )
        self._process = proc
        self._port = port
        self._repo_path = repo_path
        self._url = f"http://{LOCALHOST}:{port}"
        self._tasks = [
            asyncio.create_task(self._pipe_output(proc.stdout, "stdout")),
            asyncio.create_task(self._pipe_output(proc.stderr, "stderr")),
            asyncio.create_task(self._watch_exit(proc)),
        ]

        timeout = settings.opencode_startup_timeout_seconds()
        if not await self.wait_for_server_ready(self._url, timeout):
            raise OpencodeServiceError(
                "OpenCode server failed to start within timeout",
                "STARTUP_TIMEOUT",
                f"The server did not respond within {timeout:g} seconds",
            )
        logger.info("OpenCode server started", url=self._url, pid=proc.pid)
        return self._url

    async def wait_for_server_ready(
        self,
        url: str,
        timeout: float,
        interval: float = READY_POLL_INTERVAL,
    ) -> bool:
        """Poll ``url`` until the server answers.

        Any HTTP response counts as ready, and so does a read timeout (the
        socket accepted the connection). Returns False on timeout or if the
        process exits first.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        async with httpx.AsyncClient(transport=self._transport, timeout=interval) as client:
            while loop.time() < deadline:
                if self._process is not None and self._process.returncode is not None:
                    logger.warning(
                        "OpenCode server exited during startup",
                        exit_code=self._process.returncode,
                    )
                    return False
                try:
                    response = await client.get(url)
                    logger.info("OpenCode server is ready", status_code=response.status_code)
                    return True
                except httpx.ReadTimeout:
                    logger.info("OpenCode server is up (slow response)")
                    return True
                except httpx.TransportError:
                    pass
                await asyncio.sleep(interval)
        return False

    async def _pipe_output(self, stream: asyncio.StreamReader | None, name: str) -> None:
        if stream is None:
            return
        with suppress(asyncio.CancelledError):
            async for raw in stream:
                line = raw.decode("utf-8", errors="replace").rstrip()
                if not line:
                    continue
                if name == "stderr":
                    logger.warning("OpenCode output", stream=name, line=line)
                else:
                    logger.info("OpenCode output", stream=name, line=line)

    async def _watch_exit(self, proc: asyncio.subprocess.Process) -> None:
        with suppress(asyncio.CancelledError):
            exit_code = await proc.wait()
            logger.info("OpenCode server exited", exit_code=exit_code)
            if self._process is proc:
                self._reset()

    def _reset(self) -> None:
        self._process = None
        self._url = None
        self._port = None

    async def stop(self) -> None:
        """Stop the server if one is running."""
        async with self._lock:
            await self._shutdown()

    async def _shutdown(self) -> None:
        proc = self._process
        tasks, self._tasks = self._tasks, []
        if proc is not None and proc.returncode is None:
            logger.info("Stopping OpenCode server", pid=proc.pid)
            with suppress(ProcessLookupError):
                proc.terminate()
            try:
                await asyncio.wait_for(proc.wait(), timeout=GRACEFUL_SHUTDOWN_SECONDS)
            except asyncio.TimeoutError:
                logger.warning("OpenCode server did not terminate, killing", pid=proc.pid)
                with suppress(ProcessLookupError):
                    proc.kill()
                with suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(proc.wait(), timeout=GRACEFUL_SHUTDOWN_SECONDS)
            logger.info("OpenCode server stopped")
        for task in tasks:
            task.cancel()
        self._reset()

    async def create_session(self, prompt: str, title: str = "PR Review") -> str | None:
        """Create a chat session and queue ``prompt`` in it.

        Returns the session id, or None if the session could not be created.
        A failure to send the prompt is logged and the session id still
        returned so the caller can attach to it.
        """
        if not self._url:
            return None
        try:
            async with httpx.AsyncClient(
                base_url=self._url, transport=self._transport, timeout=10.0
            ) as client:
                response = await client.post("/session", json={"title": title})
                response.raise_for_status()
                session_id = response.json()["id"]
                logger.info("Created OpenCode session", session_id=session_id)

                prompt_response = await client.post(
                    f"/session/{session_id}/prompt_async",
                    json={
                        "model": {
                            "providerID": settings.opencode_provider(),
                            "modelID": settings.opencode_model(),
                        },
                        "parts": [{"type": "text", "text": prompt}],
                    },
                )
                if prompt_response.is_error:
                    logger.warning(
                        "Failed to send prompt to OpenCode session",
                        session_id=session_id,
                        status_code=prompt_response.status_code,
                        body=prompt_response.text[:200],
                    )
                else:
                    logger.info(
                        "Sent PR context to OpenCode session",
                        session_id=session_id,
                        prompt_length=len(prompt),
                    )
                return session_id
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.warning("Failed to create OpenCode session", error=str(exc))
            return None

    async def spawn_tui(self, prompt: str | None = None) -> str | None:
        """Attach the OpenCode TUI to the running server in this terminal.

        When ``prompt`` is given a session is created first so the TUI opens
        with the PR context loaded. Returns the session id, if any.
        """
        if not self.is_running or not self._url or not self._repo_path:
            raise OpencodeServiceError("OpenCode server is not running", "NOT_RUNNING")

        session_id = await self.create_session(prompt) if prompt else None
        args = [self.binary, "attach", self._url, "--dir", self._repo_path]
        if session_id:
            args.extend(["--session", session_id])
        logger.info("Launching OpenCode TUI", args=args, session_id=session_id)
        await asyncio.create_subprocess_exec(
            *args,
            cwd=self._repo_path,
            env={**os.environ, **_SCRUBBED_ENV},
        )
        return session_id


opencode_manager = OpencodeManager()
