from __future__ import annotations
import asyncio
import logging
import ssl
from dataclasses import dataclass
from typing import Optional

from aiomqtt import Client, MqttError

from .bridge import DeviceBridge

logger = logging.getLogger(__name__)


@dataclass
class BrokerConfig:
    host: str = "localhost"
    port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    tls: bool = False
    reconnect_seconds: float = 2.0


class MqttLink:
    """
    Broker connection for one device bridge.
    Responsible for: connect/reconnect, (re)subscribing, feeding inbound
    messages to the bridge and publishing commands without waiting on them.
    """

    def __init__(self, cfg: BrokerConfig, bridge: DeviceBridge) -> None:
        self.cfg = cfg
        self._bridge = bridge
        self._client: Optional[Client] = None
        self._connected = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()
        self._pending: set = set()
        self.last_error: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self._connected and self._client is not None

    async def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="mqtt_link")

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    def publish(self, topic: str, payload: bytes) -> None:
        client, loop = self._client, self._loop
        if client is None or loop is None:
            raise RuntimeError("MQTT client not connected")

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        # API handlers may run off the event loop thread
        if running is loop:
            fut = loop.create_task(client.publish(topic, payload))
        else:
            coro = client.publish(topic, payload)
            try:
                fut = asyncio.run_coroutine_threadsafe(coro, loop)
            except RuntimeError:
                coro.close()
                raise
        self._pending.add(fut)
        fut.add_done_callback(self._publish_done)

    def _publish_done(self, fut) -> None:
        self._pending.discard(fut)
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            logger.warning("MQTT publish failed: %s", exc)

    def _tls_context(self) -> Optional[ssl.SSLContext]:
        if not self.cfg.tls:
            return None
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        return ctx

    async def _run(self) -> None:
        while not self._stop.is_set():
            try:
                logger.info("Connecting to MQTT broker %s:%s", self.cfg.host, self.cfg.port)
                async with Client(
                    self.cfg.host,
                    port=self.cfg.port,
                    username=self.cfg.username,
                    password=self.cfg.password,
                    tls_context=self._tls_context(),
                    tls_insecure=True if self.cfg.tls else None,
                ) as client:
                    self._client = client
                    self._connected = True
                    self.last_error = None
                    try:
                        for topic in self._bridge.on_connected():
                            await client.subscribe(topic)
                        await self._pump_messages(client)
                    finally:
                        self._connected = False
                        self._client = None
            except MqttError as exc:
                self.last_error = str(exc)
                self._bridge.on_transport_error(exc)
                logger.warning("MQTT error %s; retrying", exc)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Unhandled MQTT loop error")

            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.cfg.reconnect_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info("MQTT link stopped")

    async def _pump_messages(self, client: Client) -> None:
        async for message in client.messages:
            payload = message.payload
            if isinstance(payload, str):
                payload = payload.encode()
            elif not isinstance(payload, (bytes, bytearray)):
                payload = b""
            try:
                self._bridge.handle_message(message.topic.value, bytes(payload))
            except Exception:
                logger.exception("Failed handling message on %s", message.topic.value)
