from area_pulse.clients.area_pulse_api import AreaPulseApi

__all__ = ["AreaPulseApi"]
