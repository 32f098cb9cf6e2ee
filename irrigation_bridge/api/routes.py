from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..services.bridge import DeviceBridge
from .schemas import LogEntryOut, PumpRequest, StateOut, ThresholdIn

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependency getters ---
# main.py (or a test) wires the real bridge in via app.dependency_overrides.
def get_bridge() -> DeviceBridge:  # overridden in main
    raise RuntimeError("Bridge dependency not configured")


@router.get("/", response_class=PlainTextResponse)
async def index():
    return "ESP32 MQTT server ready"


@router.get("/state", response_model=StateOut)
async def get_state(bridge: DeviceBridge = Depends(get_bridge)):
    s = bridge.snapshot()
    r = s.last_reading
    return StateOut(temp=r.temperature, humidity=r.humidity, soil=r.soil_moisture, pump=s.pump_on)


@router.get("/threshold")
async def get_threshold(bridge: DeviceBridge = Depends(get_bridge)):
    return bridge.thresholds().as_dict()


@router.post("/threshold")
async def replace_threshold(req: ThresholdIn, bridge: DeviceBridge = Depends(get_bridge)):
    bridge.replace_thresholds(req.to_domain())
    return {"ok": True}


@router.post("/pump")
async def pump(req: PumpRequest, bridge: DeviceBridge = Depends(get_bridge)):
    sent = bridge.manual_pump(req.is_on())
    return {"ok": True, "sent": sent}


@router.get("/logs", response_model=list[LogEntryOut])
async def logs(bridge: DeviceBridge = Depends(get_bridge)):
    return [LogEntryOut(time=e.time.isoformat(), msg=e.msg) for e in bridge.log.entries()]


@router.get("/health")
async def health():
    return {"ok": True}
