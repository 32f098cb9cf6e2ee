from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Irrigation Bridge"

    # Device / topics
    device_id: str = "esp32_wokwi_test_bin"

    # MQTT broker
    broker_host: str = "localhost"
    broker_port: int = 1883
    broker_username: str | None = None
    broker_password: str | None = None
    broker_tls: bool = False          # TLS without certificate verification
    reconnect_seconds: float = 2.0

    # HTTP API
    http_host: str = "0.0.0.0"
    http_port: int = 4000
    cors_origins: list[str] = ["*"]   # JSON list in env, e.g. '["http://localhost:5173"]'

    # Pump control
    pump_debounce_ms: int = 1000
    pump_target_offset: float = 5.0   # stop pumping at soil max - offset

    # Activity log
    log_capacity: int = Field(default=5000, ge=1)
    log_file: str = "irrigation_bridge.log"

    # Default thresholds (replaceable at runtime via the API)
    temp_min: float = 20
    temp_max: float = 50
    humidity_min: float = 60
    humidity_max: float = 95
    soil_min: float = 30
    soil_max: float = 80


settings = Settings()
