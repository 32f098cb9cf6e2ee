import ssl
from datetime import timedelta

import pytest

from irrigation_bridge.core.config import Settings
from irrigation_bridge.main import build_bridge, build_link
from irrigation_bridge.services.mqtt_link import BrokerConfig, MqttLink


def test_build_bridge_from_settings():
    cfg = Settings(device_id="farm7", soil_min=40, soil_max=70, pump_debounce_ms=250,
                   pump_target_offset=2.5, log_capacity=10)
    bridge = build_bridge(cfg)
    assert bridge.topics.data == "devices/farm7/data"
    assert bridge.topics.status == "devices/farm7/status"
    assert bridge.topics.command == "devices/farm7/command"
    assert bridge.thresholds().soil_moisture.min == 40
    assert bridge.controller.debounce == timedelta(milliseconds=250)
    assert bridge.controller.target_offset == 2.5
    assert bridge.log.capacity == 10


def test_link_not_connected_before_start(bridge):
    link = MqttLink(BrokerConfig(), bridge)
    assert link.connected is False
    with pytest.raises(RuntimeError):
        link.publish("devices/dev1/command", b"\x02\x01")


def test_bridge_drops_command_through_idle_link(topics, log_messages, bridge):
    bridge.attach_publisher(build_link(Settings(), bridge))
    assert bridge.manual_pump(True) is True
    assert "MQTT disconnected, command dropped" in log_messages()


def test_tls_context_skips_verification(bridge):
    assert MqttLink(BrokerConfig(tls=False), bridge)._tls_context() is None
    ctx = MqttLink(BrokerConfig(tls=True), bridge)._tls_context()
    assert ctx.verify_mode == ssl.CERT_NONE
    assert ctx.check_hostname is False
