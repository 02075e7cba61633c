"""Titan WebSocket session.

One connection carries many logically independent requests. Each request
carries an id; replies name the request they answer. Streaming requests are
acknowledged with a stream id and then deliver StreamData frames until
StreamEnd or StopStream.

Frames are JSON:
    -> {"id": 1, "data": {"GetSwapPrice": {...}}}
    <- {"Response": {"requestId": 1, "data": {...}, "stream": {"id": 7}}}
    <- {"Error": {"requestId": 1, "code": 404, "message": "..."}}
    <- {"StreamData": {"id": 7, "seq": 0, "payload": {...}}}
    <- {"StreamEnd": {"id": 7}}
"""

import asyncio
import itertools
import json
import logging
from typing import Any, Optional

from websockets.asyncio.client import connect

logger = logging.getLogger(__name__)


class TitanSessionError(Exception):
    """Raised when the session is closed or the server rejects a request."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class TitanStream:
    """Frames delivered for one streaming request."""

    def __init__(self, session: "TitanSession", stream_id: int, queue: asyncio.Queue):
        self.session = session
        self.stream_id = stream_id
        self._queue = queue

    async def recv(self) -> Optional[dict]:
        """Next payload, or None once the stream has ended."""
        payload = await self._queue.get()
        if isinstance(payload, Exception):
            raise payload
        return payload

    async def stop(self) -> None:
        """Ask the server to stop sending and release the stream."""
        try:
            await self.session.request("StopStream", {"id": self.stream_id})
        finally:
            self.session._streams.pop(self.stream_id, None)


class TitanSession:
    """A live Titan connection multiplexing requests and streams."""

    def __init__(self, websocket: Any):
        self._ws = websocket
        self._ids = itertools.count(1)
        self._pending: dict[int, asyncio.Future] = {}
        self._streams: dict[int, asyncio.Queue] = {}
        self._closed: Optional[TitanSessionError] = None
        self._reader = asyncio.ensure_future(self._read_loop())

    @classmethod
    async def connect(
        cls,
        url: str,
        token: Optional[str] = None,
        open_timeout: float = 30.0,
    ) -> "TitanSession":
        headers = {"Authorization": f"Bearer {token}"} if token else None
        websocket = await connect(url, additional_headers=headers, open_timeout=open_timeout)
        logger.debug(f"Titan WebSocket connected: {url}")
        return cls(websocket)

    @property
    def is_closed(self) -> bool:
        return self._closed is not None

    async def request(self, method: str, params: dict) -> dict:
        """Send one request and wait for its Response body."""
        if self._closed is not None:
            raise self._closed

        request_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self._ws.send(json.dumps({"id": request_id, "data": {method: params}}))
            return await future
        except TitanSessionError:
            raise
        except Exception as e:
            raise TitanSessionError(f"{method} failed: {type(e).__name__}: {e}") from e
        finally:
            self._pending.pop(request_id, None)

    async def open_stream(self, method: str, params: dict) -> TitanStream:
        """Start a streaming request."""
        response = await self.request(method, params)
        stream_id = (response.get("stream") or {}).get("id")
        if stream_id is None:
            raise TitanSessionError(f"{method} response carried no stream id")
        return TitanStream(self, stream_id, self._streams.setdefault(stream_id, asyncio.Queue()))

    async def close(self) -> None:
        await self._ws.close()
        await self._reader

    async def _read_loop(self) -> None:
        reason = "session closed"
        try:
            async for raw in self._ws:
                try:
                    message = json.loads(raw)
                except ValueError:
                    logger.warning(f"Ignoring non-JSON Titan frame: {raw!r:.200}")
                    continue
                self._dispatch(message)
        except Exception as e:
            reason = f"session closed: {type(e).__name__}: {e}"
            logger.warning(f"Titan {reason}")

        self._closed = TitanSessionError(reason)
        for future in self._pending.values():
            if not future.done():
                future.set_exception(self._closed)
        for queue in self._streams.values():
            queue.put_nowait(self._closed)

    def _dispatch(self, message: Any) -> None:
        if not isinstance(message, dict) or len(message) != 1:
            logger.warning(f"Ignoring malformed Titan frame: {message!r:.200}")
            return
        ((kind, body),) = message.items()
        if not isinstance(body, dict):
            logger.warning(f"Ignoring Titan {kind} frame with a non-object body")
            return

        if kind == "Response":
            stream = body.get("stream")
            request_id = body.get("requestId")
            waiting = self._pending.get(request_id)
            is_live = waiting is not None and not waiting.done()
            if is_live and isinstance(stream, dict) and "id" in stream:
                # Registered before the caller resumes so early StreamData is kept.
                # A late reply to an abandoned request opens no queue.
                self._streams.setdefault(stream["id"], asyncio.Queue())
            self._resolve(request_id, result=body)
        elif kind == "Error":
            error = TitanSessionError(body.get("message", "request failed"), code=body.get("code"))
            self._resolve(body.get("requestId"), error=error)
        elif kind == "StreamData":
            queue = self._streams.get(body.get("id"))
            if queue is not None:
                queue.put_nowait(body.get("payload") or {})
        elif kind == "StreamEnd":
            queue = self._streams.get(body.get("id"))
            if queue is not None:
                queue.put_nowait(None)
        else:
            logger.debug(f"Ignoring unknown Titan frame: {kind}")

    def _resolve(self, request_id: Any, result: Any = None, error: Optional[Exception] = None) -> None:
        future = self._pending.get(request_id)
        if future is None or future.done():
            logger.debug(f"Titan reply for unknown request {request_id}")
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)
