"""FastAPI application factory for the Solar Automation API."""

from __future__ import annotations

from fastapi import FastAPI, Request

from solar_automation import __version__
from solar_automation.automation.store import AutomationStore
from solar_automation.config.schema import AppConfig
from solar_automation.control.command import CommandPublisher
from solar_automation.inverter.profiles import InverterProfiles
from solar_automation.notify.hub import NotificationHub
from solar_automation.state.store import StateStore


def create_app(
    config: AppConfig,
    state_store: StateStore,
    automation: AutomationStore,
    profiles: InverterProfiles,
    publisher: CommandPublisher,
    hub: NotificationHub,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Solar Automation",
        description="Inverter automation rules, schedules and live state",
        version=__version__,
    )

    @app.middleware("http")
    async def disable_browser_cache(request: Request, call_next):
        response = await call_next(request)
        if request.method in {"GET", "HEAD"}:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
        return response

    # Shared services for route handlers
    app.state.config = config
    app.state.state_store = state_store
    app.state.automation = automation
    app.state.profiles = profiles
    app.state.publisher = publisher
    app.state.hub = hub

    from solar_automation.dashboard.routes.api import router as api_router
    from solar_automation.dashboard.routes.sse import router as sse_router

    app.include_router(api_router, prefix="/api")
    app.include_router(sse_router, prefix="/api")

    return app
