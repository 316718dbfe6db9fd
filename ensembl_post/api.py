"""Batch requests to an Ensembl POST endpoint and hand results back one by one."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from itertools import islice
from typing import Any

import httpx

from .endpoint import EnsemblError, EnsemblPostEndpoint

__all__ = [
    "ENSEMBL_SERVER",
    "MAX_ATTEMPTS",
    "RETRY_STATUSES",
    "WAIT_DELAY",
    "Client",
    "Getter",
    "parse_response",
]

logger = logging.getLogger(__name__)

ENSEMBL_SERVER = "https://rest.ensembl.org"
WAIT_DELAY = 0.5
"""Minimum time, in seconds, between two batches of requests."""
RETRY_STATUSES = frozenset({403, 408, 429, 502, 503})
MAX_ATTEMPTS = 3

_QUEUE_SIZE = 500
_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}
_STOP = object()

# status -> (message given to callers, pause in seconds, message logged)
_FIXED_FAILURES = {
    403: (
        "403 Forbidden: Too many requests.",
        300,
        "403 Forbidden: Too many requests. Waiting for 5 mins before trying again",
    ),
    404: (
        "Not Found: Badly formatted request.",
        0,
        "Not Found: Check your URL or request format.",
    ),
    408: (
        "Request Timeout. Pausing requests for 1 minute",
        60,
        "Request Timeout. Pausing requests for 1 minute",
    ),
    502: ("Bad gateway.", 10, "Bad Gateway: Retrying after a pause..."),
    503: (
        "Service Unavailable.",
        10,
        "Service Unavailable: Retrying after a pause...",
    ),
}


def parse_response(
    endpoint: type[EnsemblPostEndpoint], text: str
) -> list[EnsemblPostEndpoint]:
    """Decode a response body that is a JSON list of results or an object of them."""
    try:
        data = json.loads(text)
    except ValueError as err:
        raise ValueError(f"Failed to parse the following response: {text}\n{err}") from err
    if isinstance(data, dict):
        items: Iterable[Any] = data.values()
    elif isinstance(data, list):
        items = data
    else:
        raise ValueError(f"Failed to parse the following response: {text}")
    try:
        return [endpoint.from_json(item) for item in items]
    except ValueError as err:
        raise ValueError(f"Failed to parse the following response: {text}\n{err}") from err


def _chunks(items: list[str], size: int) -> Iterator[list[str]]:
    iterator = iter(items)
    while chunk := list(islice(iterator, size)):
        yield chunk


def _settle(
    futures: list[asyncio.Future[Any]],
    result: Any = None,
    error: BaseException | None = None,
) -> None:
    for future in futures:
        if future.done():
            continue
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)


def _reset_seconds(response: httpx.Response) -> int:
    raw = response.headers.get("X-RateLimit-Reset")
    try:
        seconds = int(raw) if raw is not None else 60
    except ValueError:
        return 60
    return seconds if seconds >= 0 else 60


class Getter:
    """Collects identifiers from its clients and posts them to Ensembl in batches.

    A background task waits ``wait_delay`` seconds, takes every queued request,
    posts them in chunks of the endpoint's ``max_post_size`` and settles each
    caller with its result or an :class:`EnsemblError`.
    """

    def __init__(
        self,
        endpoint: type[EnsemblPostEndpoint],
        http_client: httpx.AsyncClient | None = None,
        server: str = ENSEMBL_SERVER,
        wait_delay: float = WAIT_DELAY,
    ) -> None:
        self._endpoint = endpoint
        self._http = http_client
        self._owns_http = http_client is None
        self._server = server
        self._wait_delay = wait_delay
        self._queue: asyncio.Queue[Any] | None = None
        self._task: asyncio.Task[None] | None = None
        self._closed = False

    def start(self) -> None:
        """Start the background task; must be called inside a running event loop."""
        if self._closed:
            raise RuntimeError("Getter has been closed")
        if self._task is not None:
            return
        asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=_QUEUE_SIZE)
        if self._http is None:
            self._http = httpx.AsyncClient()
        self._task = asyncio.create_task(self._run())

    def client(self) -> Client:
        """A handle that tasks use to request results from this getter."""
        return Client(self)

    async def close(self) -> None:
        """Stop accepting requests, finish the queued ones and stop the task."""
        if self._closed:
            return
        self._closed = True
        if self._task is None or self._queue is None:
            return
        await self._queue.put(_STOP)
        await self._task
        if self._owns_http and self._http is not None:
            await self._http.aclose()

    async def __aenter__(self) -> Getter:
        self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _submit(self, identifier: str) -> asyncio.Future[Any]:
        if self._closed:
            raise RuntimeError(
                f"Getter was closed or dropped receiving request: {identifier}"
            )
        self.start()
        assert self._queue is not None
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        await self._queue.put((identifier, future))
        return future

    def _drain(self, pending: dict[str, list[asyncio.Future[Any]]]) -> bool:
        """Move queued requests into ``pending``; report whether a stop was seen."""
        assert self._queue is not None
        stopping = False
        while True:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return stopping
            if item is _STOP:
                stopping = True
                continue
            identifier, future = item
            pending.setdefault(identifier, []).append(future)

    async def _run(self) -> None:
        assert self._queue is not None
        while True:
            await asyncio.sleep(self._wait_delay)
            item = await self._queue.get()
            if item is _STOP:
                break
            identifier, future = item
            pending = {identifier: [future]}
            stopping = self._drain(pending)
            await self._process(pending)
            if stopping:
                break
        pending = {}
        self._drain(pending)
        await self._process(pending)

    async def _process(self, pending: dict[str, list[asyncio.Future[Any]]]) -> None:
        if not pending:
            return
        url = self._server + self._endpoint.extension()
        try:
            for chunk in _chunks(list(pending), self._endpoint.max_post_size()):
                await self._post(url, chunk, pending)
        except Exception as err:  # the batch cannot continue; tell every caller
            logger.error("%s", err)
            for identifier, futures in pending.items():
                _settle(futures, error=EnsemblError(0, identifier, str(err)))
            pending.clear()
            return
        for identifier, futures in pending.items():
            _settle(
                futures,
                error=EnsemblError(
                    404,
                    identifier,
                    f"The input {identifier} did not give results, usually this "
                    "means that it is not formated correctly.",
                ),
            )
        pending.clear()

    async def _post(
        self,
        url: str,
        chunk: list[str],
        pending: dict[str, list[asyncio.Future[Any]]],
    ) -> None:
        assert self._http is not None
        response = await self._http.post(
            url, headers=_HEADERS, content=self._endpoint.build_payload(chunk)
        )
        status = response.status_code
        if status == 200:
            for output in parse_response(self._endpoint, response.text):
                futures = pending.pop(output.input(), None)
                if futures is None:
                    logger.warning("Unexpected result for input %r", output.input())
                    continue
                _settle(futures, result=output)
            return

        pause = 0
        if status in _FIXED_FAILURES:
            message, pause, logged = _FIXED_FAILURES[status]
            logger.warning("%s", logged)
        elif status == 429:
            pause = _reset_seconds(response)
            message = f"Too Many Requests: Rate limit resets in {pause} seconds."
            logger.warning(
                "Too Many Requests: Rate limit resets in %s seconds. Waiting...", pause
            )
        elif status == 400:
            message = f"Bad Request: {response.text}"
            logger.warning("%s", message)
        else:
            message = response.text
            logger.warning("Unexpected status code %s: %s", status, message)

        for identifier in chunk:
            futures = pending.pop(identifier, [])
            _settle(futures, error=EnsemblError(status, identifier, message))
        if pause:
            await asyncio.sleep(pause)


@dataclass(frozen=True)
class Client:
    """A shareable handle for requesting results through a :class:`Getter`."""

    getter: Getter

    async def get(self, identifier: str) -> Any:
        """Return the result for ``identifier``, retrying transient failures.

        Raises :class:`EnsemblError` when Ensembl reports a failure and
        ``RuntimeError`` when the getter has been closed.
        """
        attempts = 0
        while True:
            future = await self.getter._submit(identifier)
            try:
                return await future
            except EnsemblError as err:
                attempts += 1
                if attempts < MAX_ATTEMPTS and err.status_code in RETRY_STATUSES:
                    logger.warning(
                        "Error getting Ensembl data for %s. Retry(%d)...\n%s",
                        identifier,
                        attempts,
                        err,
                    )
                    continue
                raise