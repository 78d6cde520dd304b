"""
Settings Models.

Pydantic models for the bus and logging configuration.
Loaded and persisted by ConfigManager (see config.py).
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class BusSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    name: str = "default"
    default_debounce_seconds: float = Field(default=1.0, ge=0)
    # Forward listener faults to loop.call_exception_handler as well as the log
    forward_faults_to_loop: bool = True


class LoggingSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    debug_mode: bool = False
    log_dir: Optional[str] = None


class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    bus: BusSettings = Field(default_factory=BusSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
