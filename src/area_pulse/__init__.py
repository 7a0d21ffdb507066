"""Client core for the AreaPulse neighbourhood information service."""

from area_pulse.clients.area_pulse_api import AreaPulseApi
from area_pulse.config import ClientSettings, load_settings
from area_pulse.services.location_query_service import LocationQueryService
from area_pulse.session.manager import SessionManager, SessionState

__all__ = [
    "AreaPulseApi",
    "ClientSettings",
    "LocationQueryService",
    "SessionManager",
    "SessionState",
    "load_settings",
]
