from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import Settings, settings
from .core.log import configure_logging

from .api.routes import router as api_router
import irrigation_bridge.api.routes as routes_module

from .domain.activity_log import ActivityLog
from .domain.controller import PumpController
from .domain.models import Bounds, ThresholdConfig
from .domain.topics import DeviceTopics
from .services.bridge import DeviceBridge
from .services.mqtt_link import BrokerConfig, MqttLink


logger = logging.getLogger(__name__)


def build_bridge(cfg: Settings) -> DeviceBridge:
    thresholds = ThresholdConfig(
        temperature=Bounds(cfg.temp_min, cfg.temp_max),
        humidity=Bounds(cfg.humidity_min, cfg.humidity_max),
        soil_moisture=Bounds(cfg.soil_min, cfg.soil_max),
    )
    controller = PumpController(
        debounce=timedelta(milliseconds=cfg.pump_debounce_ms),
        target_offset=cfg.pump_target_offset,
    )
    return DeviceBridge(
        topics=DeviceTopics.for_device(cfg.device_id),
        controller=controller,
        log=ActivityLog(capacity=cfg.log_capacity),
        thresholds=thresholds,
    )


def build_link(cfg: Settings, bridge: DeviceBridge) -> MqttLink:
    link = MqttLink(
        BrokerConfig(
            host=cfg.broker_host,
            port=cfg.broker_port,
            username=cfg.broker_username,
            password=cfg.broker_password,
            tls=cfg.broker_tls,
            reconnect_seconds=cfg.reconnect_seconds,
        ),
        bridge,
    )
    bridge.attach_publisher(link)
    return link


def create_app(cfg: Settings = settings) -> FastAPI:
    bridge = build_bridge(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(cfg.log_file)
        logger.info("Starting %s (device=%s)", cfg.app_name, cfg.device_id)

        link = build_link(cfg, bridge)
        app.state.link = link
        await link.start()
        bridge.log.add(f"Server started on port {cfg.http_port}")

        try:
            yield
        finally:
            await link.stop()
            logger.info("Shutdown complete")

    app = FastAPI(title=cfg.app_name, lifespan=lifespan)
    app.state.bridge = bridge

    # Browser dashboard is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.dependency_overrides[routes_module.get_bridge] = lambda: bridge
    app.include_router(api_router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.http_host, port=settings.http_port)
