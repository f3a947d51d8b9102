# /config/custom_components/prusa_link/sensor.py
from __future__ import annotations

from typing import Any, Callable, Optional

from homeassistant.components.sensor import SensorEntity, SensorDeviceClass
from homeassistant.const import UnitOfTemperature, PERCENTAGE
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .printer import Printer, PrinterState, Temperature


# ----------------- Helpers -----------------

def _printer_device_info(entry_obj, client) -> DeviceInfo:
    return DeviceInfo(
        identifiers={(DOMAIN, client.endpoint)},
        manufacturer="Prusa Research",
        model="PrusaLink Printer",
        name=entry_obj.title,
        configuration_url=client.endpoint,
    )


def _tool_reading(tool: str, attr: str) -> Callable[[Printer], Optional[float]]:
    def _value(p: Printer) -> Optional[float]:
        t: Optional[Temperature] = p.tool_temperatures.get(tool)
        return None if t is None else getattr(t, attr)
    return _value


STATE_OPTIONS = [s.value.lower() for s in PrinterState]

# key -> (name, unit, device class, value)
PRINTER_SENSORS: dict[str, tuple[str, Any, Any, Callable[[Printer], Any]]] = {
    "state": ("State", None, SensorDeviceClass.ENUM, lambda p: p.state.value.lower()),
    "material": ("Material", None, None, lambda p: p.material or None),
    "print_speed": ("Print Speed", PERCENTAGE, None, lambda p: p.print_speed),
    "tool_count": ("Tool Count", None, None, lambda p: p.tool_count),
    "bed_temp": ("Bed Temperature", UnitOfTemperature.CELSIUS, SensorDeviceClass.TEMPERATURE,
                 lambda p: p.bed_temperature.actual),
    "bed_target": ("Bed Target", UnitOfTemperature.CELSIUS, SensorDeviceClass.TEMPERATURE,
                   lambda p: p.bed_temperature.target),
}


def tool_sensors(printer: Printer) -> dict[str, tuple[str, Any, Any, Callable[[Printer], Any]]]:
    """Per-tool temperature sensors for every tool channel in the snapshot."""
    sensors = {}
    for tool in sorted(printer.tool_temperatures):
        sensors[f"{tool}_temp"] = (
            f"{tool.capitalize()} Temperature", UnitOfTemperature.CELSIUS,
            SensorDeviceClass.TEMPERATURE, _tool_reading(tool, "actual"),
        )
        sensors[f"{tool}_target"] = (
            f"{tool.capitalize()} Target", UnitOfTemperature.CELSIUS,
            SensorDeviceClass.TEMPERATURE, _tool_reading(tool, "target"),
        )
    return sensors


# ----------------- Setup -----------------

async def async_setup_entry(hass, entry, async_add_entities):
    data = hass.data[DOMAIN][entry.entry_id]
    client = data["client"]
    coordinator = data["coordinator"]
    entry_obj = data["entry"]

    printer_device = _printer_device_info(entry_obj, client)

    class PrinterSensor(CoordinatorEntity, SensorEntity):
        _attr_has_entity_name = True
        _attr_entity_registry_enabled_default = True

        def __init__(self, key: str, name: str, unit, device_class, value):
            super().__init__(coordinator)
            self._value = value
            self._attr_name = name
            self._attr_native_unit_of_measurement = unit
            self._attr_device_class = device_class
            if device_class == SensorDeviceClass.ENUM:
                self._attr_options = STATE_OPTIONS
            self._attr_unique_id = f"{client.endpoint}_{key}"

        @property
        def device_info(self) -> DeviceInfo:
            return printer_device

        @property
        def native_value(self):
            printer: Optional[Printer] = self.coordinator.data
            if printer is None:
                return None
            return self._value(printer)

    # tool channels are fixed per printer; take them from the first snapshot
    sensors = {**PRINTER_SENSORS, **tool_sensors(coordinator.data or Printer())}
    async_add_entities(
        PrinterSensor(key, name, unit, device_class, value)
        for key, (name, unit, device_class, value) in sensors.items()
    )
