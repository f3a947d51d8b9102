from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .const import BED_SENSOR, TOOL_SENSOR_PREFIX

_LOGGER = logging.getLogger(__name__)


# ---------- Wire payload (GET /printer) ----------

class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _null_is_missing(cls, data: Any) -> Any:
        # null takes the zero value, same as an absent key
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


def _flag(alias: str | None = None):
    return Field(default=False, alias=alias, strict=True)


def _reading(alias: str | None = None):
    return Field(default=0.0, alias=alias, strict=True, allow_inf_nan=False)


class PrinterStateFlagsResponse(_WireModel):
    operational: bool = _flag()
    paused: bool = _flag()
    printing: bool = _flag()
    cancelling: bool = _flag()
    pausing: bool = _flag()
    sd_ready: bool = _flag("sdReady")
    error: bool = _flag()
    closed_on_error: bool = _flag("closedOnError")
    ready: bool = _flag()
    busy: bool = _flag()
    finished: bool = _flag()
    link_state: str = Field(default="", strict=True)


class PrinterStateResponse(_WireModel):
    text: str = Field(default="", strict=True)
    flags: PrinterStateFlagsResponse = Field(default_factory=PrinterStateFlagsResponse)


class PrinterTelemetryResponse(_WireModel):
    temp_bed: float = _reading("temp-bed")
    temp_nozzle: float = _reading("temp-nozzle")
    print_speed: int = Field(default=0, alias="print-speed", strict=True)
    z_height: float = _reading("z-height")
    material: str = Field(default="", strict=True)


class PrinterTemperatureResponse(_WireModel):
    actual: float = _reading()
    target: float = _reading()
    display: float = _reading()
    offset: float = _reading()


class PrinterResponse(_WireModel):
    """Decoded body of GET /printer, kept as the device sent it.

    Wrong JSON types and non-finite numbers fail validation; missing or null
    fields take zero values.
    """

    state: PrinterStateResponse = Field(default_factory=PrinterStateResponse)
    telemetry: PrinterTelemetryResponse = Field(default_factory=PrinterTelemetryResponse)
    temperature: Dict[str, PrinterTemperatureResponse] = Field(default_factory=dict)

    @field_validator("temperature", mode="before")
    @classmethod
    def _null_readings(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {sensor: {} if reading is None else reading for sensor, reading in value.items()}
        return value


# ---------- Normalized snapshot ----------

class PrinterState(StrEnum):
    UNKNOWN = "Unknown"
    IDLE = "Idle"
    READY = "Ready"
    BUSY = "Busy"
    PAUSED = "Paused"
    PRINTING = "Printing"
    FINISHED = "Finished"
    STOPPED = "Stopped"
    ERROR = "Error"
    ATTENTION = "Attention"


# flags.link_state -> state; any other non-empty value is Unknown
LINK_STATE_MAP: Dict[str, PrinterState] = {
    "IDLE": PrinterState.IDLE,
    "READY": PrinterState.READY,
    "BUSY": PrinterState.BUSY,
    "PRINTING": PrinterState.PRINTING,
    "PAUSED": PrinterState.PAUSED,
    "FINISHED": PrinterState.FINISHED,
    "STOPPED": PrinterState.STOPPED,
    "ERROR": PrinterState.ERROR,
    "ATTENTION": PrinterState.ATTENTION,
}


@dataclass(frozen=True)
class Temperature:
    actual: float = 0.0
    target: float = 0.0


@dataclass(frozen=True)
class Printer:
    """One point-in-time view of the printer, built from a single /printer poll."""

    # e.g. Ready / Idle / Error
    state: PrinterState = PrinterState.UNKNOWN
    # loaded material as reported by the printer, e.g. "PETG"
    material: str = ""
    # percent, passed through unclamped
    print_speed: int = 0
    tool_count: int = 0
    bed_temperature: Temperature = field(default_factory=Temperature)
    tool_temperatures: Dict[str, Temperature] = field(default_factory=dict)
    # raw api response
    response: PrinterResponse = field(default_factory=PrinterResponse)


def printer_state_from_state_response(res: PrinterStateResponse) -> PrinterState:
    """Classify the printer state.

    Mirrors the Prusa-Link-Web display logic
    (https://github.com/prusa3d/Prusa-Link-Web/blob/15b3af78f2c78fbed358e411e7ff1ccb2d9e4b27/src/state.js).
    A non-empty ``link_state`` is authoritative: unrecognized values become
    Unknown and the flags are not consulted. Only when it is missing are the
    flags checked, in order. ``printing``, ``cancelling``, ``sd_ready``,
    ``closed_on_error`` and ``busy`` never take part.
    """
    flags = res.flags
    if flags.link_state:
        return LINK_STATE_MAP.get(flags.link_state, PrinterState.UNKNOWN)

    if flags.error:
        return PrinterState.ERROR
    if res.text.upper() == "BUSY":
        return PrinterState.BUSY
    if flags.finished:
        return PrinterState.FINISHED
    if flags.pausing or flags.paused:
        return PrinterState.PAUSED
    if flags.ready and flags.operational:
        return PrinterState.READY
    return PrinterState.IDLE


def printer_from_response(res: PrinterResponse) -> Printer:
    _LOGGER.debug("Printer response: %s", res)

    bed = Temperature()
    tools: Dict[str, Temperature] = {}
    for sensor, reading in res.temperature.items():
        if sensor.startswith(TOOL_SENSOR_PREFIX):
            tools[sensor] = Temperature(actual=reading.actual, target=reading.target)
            continue
        if sensor == BED_SENSOR:
            bed = Temperature(actual=reading.actual, target=reading.target)
        # anything else (chamber, ambient, ...) is dropped

    return Printer(
        state=printer_state_from_state_response(res.state),
        material=res.telemetry.material,
        print_speed=res.telemetry.print_speed,
        tool_count=len(tools),
        bed_temperature=bed,
        tool_temperatures=tools,
        response=res,
    )
