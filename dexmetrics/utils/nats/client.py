import functools
import json
import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

import nats
from nats.aio.client import Client as NATS
from nats.aio.subscription import Msg, Subscription
from nats.js.client import JetStreamContext
from nats.js.errors import NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_NATS_URL = "nats://localhost:4222"


def _default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(msg: Any) -> str:
    """Serialize message to JSON string; Decimals become strings."""
    return json.dumps(msg, default=_default)


def loads(data: str) -> Any:
    """Deserialize JSON string to Python object"""
    return json.loads(data)


class NatsClient:
    """
    A simple NATS client for JSON-encoded messages.
    Methods starting with 'a' execute asynchronously.
    """

    def __init__(self, url: str = DEFAULT_NATS_URL, connection_params: Optional[Dict[str, Any]] = None):
        self.url = url
        self.connection_params = dict(connection_params or {})
        self.connection_params.pop("servers", None)
        self.nc: Optional[NATS] = None

    @property
    def is_connected(self) -> bool:
        return self.nc is not None and self.nc.is_connected

    async def aconnect(self):
        """Asynchronously connect to NATS server"""
        logger.info(f"Connecting to NATS at {self.url}")
        self.nc = await nats.connect(servers=[self.url], **self.connection_params)
        logger.info(f"Connected to NATS at {self.url}")

    async def aclose(self):
        """Asynchronously close connection to NATS server"""
        if self.nc:
            await self.nc.close()
            self.nc = None

    async def apublish(self, subject: str, msg: Any):
        """Asynchronously publish a message to a subject"""
        if not self.nc:
            raise ConnectionError("Not connected to NATS server")
        await self.nc.publish(subject, dumps(msg).encode())

    async def asubscribe(self, subject: str, callback_hdlr: Callable[[Any], None]) -> Subscription:
        """Asynchronously subscribe to a subject"""
        if not self.nc:
            raise ConnectionError("Not connected to NATS server")
        wrapped_callback = functools.partial(self.subscribe_cb_wrapper, callback_hdlr=callback_hdlr)
        return await self.nc.subscribe(subject, cb=wrapped_callback)

    async def subscribe_cb_wrapper(self, msg: Msg, callback_hdlr: Callable[[Any], None]):
        """Wrapper for subscription callbacks to handle JSON decoding"""
        callback_hdlr(loads(msg.data.decode()))


class NatsClientJS(NatsClient):
    """
    A NATS client with JetStream support for persistent messaging.
    """

    def __init__(self, url: str = DEFAULT_NATS_URL, connection_params: Optional[Dict[str, Any]] = None):
        super().__init__(url, connection_params)
        self.js: Optional[JetStreamContext] = None

    async def aconnect(self):
        """Connect to NATS and initialize JetStream context"""
        await super().aconnect()
        self.js = self.nc.jetstream()
        logger.debug("JetStream context initialized")

    async def _stream_exists(self, stream_name: str) -> bool:
        try:
            await self.js.stream_info(stream_name)
            return True
        except NotFoundError:
            return False

    async def aregister_new_stream(self, stream_name: str, subjects: List[str]):
        """Register a JetStream stream unless it already exists"""
        if not await self._stream_exists(stream_name):
            await self.js.add_stream(name=stream_name, subjects=subjects)
            logger.info(f"Registered stream: {stream_name} with subjects: {subjects}")

    async def apublish(self, subject: str, msg: Any):
        """Publish a message to JetStream"""
        if not self.js:
            raise ConnectionError("JetStream not initialized")
        await self.js.publish(subject, dumps(msg).encode())
