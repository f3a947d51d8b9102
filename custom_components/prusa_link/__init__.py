from __future__ import annotations

import logging
from datetime import timedelta

from homeassistant.core import HomeAssistant
from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .client import PrusaLinkClient, PrusaLinkError
from .const import CONF_API_KEY, CONF_ENDPOINT, DEFAULT_SCAN_INTERVAL, DOMAIN
from .printer import Printer

PLATFORMS: list[str] = ["sensor", "binary_sensor"]
_LOGGER = logging.getLogger(__name__)


def build_update_method(client: PrusaLinkClient):
    """Coordinator update hook: one /printer poll, failures as UpdateFailed."""

    async def _async_update() -> Printer:
        try:
            printer = await client.async_get_printer()
        except PrusaLinkError as err:
            _LOGGER.warning("Polling %s failed: %s", client.endpoint, err)
            raise UpdateFailed(str(err)) from err
        _LOGGER.debug("%s state=%s", client.endpoint, printer.state)
        return printer

    return _async_update


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    endpoint = entry.data[CONF_ENDPOINT]

    client = PrusaLinkClient(
        endpoint,
        entry.data.get(CONF_API_KEY, ""),
        session=async_get_clientsession(hass),
    )

    coordinator = DataUpdateCoordinator(
        hass,
        _LOGGER,
        config_entry=entry,
        name=f"{DOMAIN}-{client.endpoint}",
        update_method=build_update_method(client),
        update_interval=timedelta(seconds=DEFAULT_SCAN_INTERVAL),
    )
    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "client": client,
        "coordinator": coordinator,
        "entry": entry,
    }

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    unloaded = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unloaded:
        hass.data[DOMAIN].pop(entry.entry_id)
    return unloaded
