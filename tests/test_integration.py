"""
Home Assistant glue: coordinator update hook, config flow error keys and the
entity value functions. None of these need a running hass instance.
"""

import pytest
from homeassistant.helpers.update_coordinator import UpdateFailed

from custom_components.prusa_link import build_update_method
from custom_components.prusa_link.binary_sensor import has_problem, is_printing
from custom_components.prusa_link.client import (
    APIError,
    ConfigurationError,
    DecodeError,
    PrusaLinkClient,
    TransportError,
)
from custom_components.prusa_link.config_flow import error_key
from custom_components.prusa_link.printer import (
    Printer,
    PrinterResponse,
    PrinterState,
    printer_from_response,
)
from custom_components.prusa_link.sensor import PRINTER_SENSORS, STATE_OPTIONS, tool_sensors

from tests.helpers import make_payload


class FakeClient(PrusaLinkClient):
    def __init__(self, result):
        super().__init__("http://printer.local/api")
        self._result = result

    async def async_get_printer(self):
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


def snapshot(**overrides):
    return printer_from_response(PrinterResponse.model_validate(make_payload(**overrides)))


# ===========================================================================
# coordinator
# ===========================================================================

class TestUpdateMethod:

    @pytest.mark.asyncio
    async def test_returns_snapshot(self):
        printer = snapshot()
        assert await build_update_method(FakeClient(printer))() is printer

    @pytest.mark.asyncio
    @pytest.mark.parametrize("err", [APIError(500), TransportError("refused"), DecodeError("garbage")])
    async def test_client_errors_become_update_failed(self, err):
        with pytest.raises(UpdateFailed) as exc:
            await build_update_method(FakeClient(err))()
        assert exc.value.__cause__ is err


# ===========================================================================
# config flow
# ===========================================================================

class TestErrorKey:

    @pytest.mark.parametrize("err,key", [
        (ConfigurationError("bad"), "invalid_endpoint"),
        (APIError(401), "invalid_auth"),
        (APIError(403), "invalid_auth"),
        (APIError(500), "cannot_connect"),
        (TransportError("timeout"), "cannot_connect"),
        (DecodeError("garbage"), "invalid_response"),
    ])
    def test_mapping(self, err, key):
        assert error_key(err) == key


# ===========================================================================
# entities
# ===========================================================================

class TestSensors:

    def test_printer_values(self):
        printer = snapshot()
        values = {key: entry[3](printer) for key, entry in PRINTER_SENSORS.items()}
        assert values == {
            "state": "ready",
            "material": "PETG",
            "print_speed": 100,
            "tool_count": 2,
            "bed_temp": 60.0,
            "bed_target": 60.0,
        }

    def test_state_is_an_option(self):
        for state in PrinterState:
            assert PRINTER_SENSORS["state"][3](Printer(state=state)) in STATE_OPTIONS

    def test_empty_material_is_none(self):
        assert PRINTER_SENSORS["material"][3](Printer()) is None

    def test_tool_sensors(self):
        printer = snapshot()
        sensors = tool_sensors(printer)
        assert sorted(sensors) == ["tool0_target", "tool0_temp", "tool1_target", "tool1_temp"]
        assert sensors["tool0_temp"][0] == "Tool0 Temperature"
        assert sensors["tool0_temp"][3](printer) == 210.0
        assert sensors["tool0_target"][3](printer) == 215.0
        # a tool that disappears later reads as unknown
        assert sensors["tool1_temp"][3](Printer()) is None

    def test_no_tools(self):
        assert tool_sensors(Printer()) == {}


class TestBinarySensors:

    def test_printing(self):
        assert is_printing(Printer(state=PrinterState.PRINTING))
        assert not is_printing(Printer(state=PrinterState.PAUSED))
        assert not is_printing(None)

    @pytest.mark.parametrize("state", [PrinterState.ERROR, PrinterState.ATTENTION])
    def test_problem(self, state):
        assert has_problem(Printer(state=state))

    def test_no_problem(self):
        assert not has_problem(Printer(state=PrinterState.READY))
        assert not has_problem(None)
