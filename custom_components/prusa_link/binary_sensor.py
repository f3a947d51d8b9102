from __future__ import annotations

from homeassistant.components.binary_sensor import BinarySensorEntity, BinarySensorDeviceClass
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .printer import Printer, PrinterState

PROBLEM_STATES = (PrinterState.ERROR, PrinterState.ATTENTION)


def is_printing(printer: Printer | None) -> bool:
    return printer is not None and printer.state == PrinterState.PRINTING


def has_problem(printer: Printer | None) -> bool:
    return printer is not None and printer.state in PROBLEM_STATES


async def async_setup_entry(hass, entry, async_add_entities):
    data = hass.data[DOMAIN][entry.entry_id]
    client = data["client"]
    coordinator = data["coordinator"]
    entry_obj = data["entry"]

    device_info = DeviceInfo(
        identifiers={(DOMAIN, client.endpoint)},
        manufacturer="Prusa Research",
        model="PrusaLink Printer",
        name=entry_obj.title,
        configuration_url=client.endpoint,
    )

    class _Base(CoordinatorEntity, BinarySensorEntity):
        _attr_has_entity_name = True
        _attr_entity_registry_enabled_default = True

        def __init__(self):
            super().__init__(coordinator)

        @property
        def device_info(self) -> DeviceInfo:
            return device_info

    class PrusaPrinting(_Base):
        _attr_name = "Printing"
        _attr_unique_id = f"{client.endpoint}_printing"
        @property
        def is_on(self) -> bool:
            return is_printing(self.coordinator.data)

    class PrusaProblem(_Base):
        _attr_name = "Error"
        _attr_unique_id = f"{client.endpoint}_error"
        _attr_device_class = BinarySensorDeviceClass.PROBLEM
        @property
        def is_on(self) -> bool:
            return has_problem(self.coordinator.data)

    async_add_entities([PrusaPrinting(), PrusaProblem()])
