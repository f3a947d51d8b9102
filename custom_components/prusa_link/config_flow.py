from __future__ import annotations

import logging

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .client import (
    APIError,
    ConfigurationError,
    DecodeError,
    PrusaLinkClient,
    TransportError,
)
from .const import CONF_API_KEY, CONF_ENDPOINT, DOMAIN

_LOGGER = logging.getLogger(__name__)


def error_key(err: Exception) -> str:
    """Map a client error onto a config flow form error."""
    if isinstance(err, ConfigurationError):
        return "invalid_endpoint"
    if isinstance(err, APIError) and err.status in (401, 403):
        return "invalid_auth"
    if isinstance(err, DecodeError):
        return "invalid_response"
    return "cannot_connect"


class PrusaLinkFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input=None) -> FlowResult:
        errors: dict[str, str] = {}

        if user_input:
            api_key = user_input.get(CONF_API_KEY, "").strip()
            try:
                client = PrusaLinkClient(
                    user_input[CONF_ENDPOINT],
                    api_key,
                    session=async_get_clientsession(self.hass),
                )
                await client.async_get_printer()
            except (ConfigurationError, APIError, DecodeError, TransportError) as err:
                _LOGGER.warning("PrusaLink validation failed: %s", err)
                errors["base"] = error_key(err)
            else:
                await self.async_set_unique_id(client.endpoint)
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=f"PrusaLink {client.host}",
                    data={CONF_ENDPOINT: client.endpoint, CONF_API_KEY: api_key},
                )

        schema = vol.Schema(
            {
                vol.Required(CONF_ENDPOINT): str,
                vol.Optional(CONF_API_KEY, default=""): str,
            }
        )
        return self.async_show_form(step_id="user", data_schema=schema, errors=errors)
