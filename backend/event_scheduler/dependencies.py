"""FastAPI dependencies shared by the routers."""
from fastapi import Request

from event_scheduler.services.timezones import TimezoneRegistry


def get_timezones(request: Request) -> TimezoneRegistry:
    """The application's timezone registry, created once at startup."""
    return request.app.state.timezones
