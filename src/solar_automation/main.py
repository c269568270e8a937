"""Solar Automation application entry point and lifecycle orchestrator.

Startup sequence:
  config → notification hub → state store → automation records →
  inverter profiles → MQTT → publisher → ingestor → evaluation loop → API
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
import sys
from pathlib import Path

from solar_automation import __version__
from solar_automation.automation.rules import RuleEngine
from solar_automation.automation.schedule import ScheduleEngine
from solar_automation.automation.store import AutomationStore
from solar_automation.config.manager import ConfigManager
from solar_automation.config.schema import AppConfig
from solar_automation.control.command import CommandPublisher
from solar_automation.control.loop import EvaluationLoop
from solar_automation.inverter.profiles import InverterProfiles
from solar_automation.logging.structured import setup_logging
from solar_automation.mqtt.client import MQTTClient
from solar_automation.mqtt.topics import subscription_topic
from solar_automation.notify.hub import NotificationHub
from solar_automation.state.ingestor import TelemetryIngestor
from solar_automation.state.store import StateStore

logger = logging.getLogger(__name__)


async def _publish_disabled(topic: str, payload: str) -> None:
    raise ConnectionError("MQTT disabled in configuration")


class Application:
    """Main application lifecycle manager.

    Owns every long-lived object; nothing is stored in module globals.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self._running = False
        self._tasks: list[asyncio.Task] = []
        self._stop_event = asyncio.Event()

        self.hub = NotificationHub(queue_size=config.dashboard.event_queue_size)
        self.state_store = StateStore(notifier=self.hub)
        self.automation = AutomationStore()
        self.profiles = InverterProfiles(config.inverter)

        self.mqtt_client: MQTTClient | None = None
        publish_fn = _publish_disabled
        if config.mqtt.enabled:
            self.mqtt_client = MQTTClient(config.mqtt)
            publish_fn = self.mqtt_client.publish
        self.publisher = CommandPublisher(publish_fn, notifier=self.hub)

        self.ingestor = TelemetryIngestor(self.state_store)
        prefix = config.mqtt.topic_prefix
        self.evaluation_loop = EvaluationLoop(
            config.automation,
            RuleEngine(self.automation.rules, self.state_store, self.publisher, self.hub, prefix),
            ScheduleEngine(self.automation.schedules, self.publisher, self.hub, prefix),
        )
        self._server = None

    async def start(self) -> None:
        """Start background tasks, then serve the API until stopped."""
        logger.info("Starting Solar Automation v%s", __version__)
        self._running = True
        self._stop_event.clear()

        # ── 1. MQTT ──────────────────────────────────────────
        if self.mqtt_client is not None:
            topic = subscription_topic(self.config.mqtt.topic_prefix)
            self.mqtt_client.subscribe(topic, self.ingestor.handle_message)
            self._tasks.append(asyncio.create_task(
                self.mqtt_client.run(), name="mqtt_listener",
            ))
        else:
            logger.warning("MQTT disabled, no telemetry will be received")

        # ── 2. Evaluation loop ───────────────────────────────
        self._tasks.append(asyncio.create_task(
            self.evaluation_loop.run(), name="evaluation_loop",
        ))

        # ── 3. API server ────────────────────────────────────
        if not self.config.dashboard.enabled:
            await self._stop_event.wait()
            return

        import uvicorn

        from solar_automation.dashboard.app import create_app

        app = create_app(
            self.config,
            self.state_store,
            self.automation,
            self.profiles,
            self.publisher,
            self.hub,
        )

        uvi_config = uvicorn.Config(
            app,
            host=self.config.dashboard.host,
            port=self.config.dashboard.port,
            log_level="warning",
            log_config=None,
        )
        server = uvicorn.Server(uvi_config)
        # Keep process signal handling in main() so Ctrl+C behaviour is predictable.
        server.install_signal_handlers = lambda: None
        self._server = server

        logger.info(
            "API available at http://%s:%d",
            self.config.dashboard.host,
            self.config.dashboard.port,
        )
        await server.serve()

    async def stop(self) -> None:
        """Stop all components in reverse order."""
        if not self._running:
            return

        logger.info("Shutting down Solar Automation")
        self._running = False
        self._stop_event.set()

        if self._server is not None:
            self._server.should_exit = True

        self.evaluation_loop.stop()
        if self.mqtt_client is not None:
            self.mqtt_client.stop()

        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        self._server = None
        logger.info("Shutdown complete")


def main() -> None:
    """Entry point for the application."""
    config_dir = Path(os.environ.get("SOLAR_AUTOMATION_CONFIG_DIR", "."))
    config_manager = ConfigManager(
        config_dir / "config.defaults.yaml",
        config_dir / "config.yaml",
    )
    config = config_manager.load()

    setup_logging(
        level=config.logging.level,
        fmt=config.logging.format,
        log_file=config.logging.file,
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    app = Application(config)
    stop_requested = False
    signal_count = 0

    async def _run() -> None:
        try:
            await app.start()
        finally:
            if app._running:
                with contextlib.suppress(Exception):
                    await app.stop()

    def _request_stop() -> None:
        nonlocal stop_requested, signal_count
        signal_count += 1
        if signal_count >= 2:
            os._exit(130)
        if stop_requested or loop.is_closed():
            return
        stop_requested = True
        loop.call_soon_threadsafe(lambda: asyncio.create_task(app.stop()))

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _request_stop)
    else:
        signal.signal(signal.SIGINT, lambda *_: _request_stop())

    try:
        loop.run_until_complete(_run())
    except KeyboardInterrupt:
        _request_stop()
        with contextlib.suppress(Exception):
            loop.run_until_complete(app.stop())
    finally:
        pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            with contextlib.suppress(Exception):
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        loop.close()


if __name__ == "__main__":
    main()
