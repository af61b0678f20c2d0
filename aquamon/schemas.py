#!/usr/bin/env python3
"""
aquamon Schemas - Pydantic models for backend payloads and dashboard requests
"""

from typing import Optional
from pydantic import BaseModel, Field


class SensorData(BaseModel):
    current_ph: Optional[float] = None
    fish_detected: Optional[bool] = None
    motor_initialized: Optional[bool] = None
    current_ph_voltage: Optional[float] = None
    feed_count: Optional[int] = None
    auto_feed_count: Optional[int] = None
    # "Never" until the first feed
    last_feed_time: Optional[str] = None
    auto_last_feed_time: Optional[str] = None
    ph_sensor_initialized: Optional[bool] = None


class StatusResponse(BaseModel):
    """GET /api response."""
    success: bool
    data: SensorData = Field(default_factory=SensorData)


class CommandResponse(BaseModel):
    """Response to POST /api and POST /api/feed_fish commands."""
    success: bool = False
    message: Optional[str] = None


class AutoModeRequest(BaseModel):
    enabled: bool
