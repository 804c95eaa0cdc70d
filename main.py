"""
Control Mirror - Main Orchestrator.
Ties all components together: object space, host feed, rebind engine, dashboard, shutdown.
"""

from __future__ import annotations
import asyncio
import os
import sys
import signal
from typing import List, Optional
import logging

from dotenv import load_dotenv

# Load .env file before reading any config
load_dotenv()

from config import MirrorConfig
from binding.rebind import RebindController
from objectspace.local import ObjectSpace
from objectspace.remote import HostFeed
from dashboard import Dashboard

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"


def setup_logging(config: MirrorConfig):
    """Stdout plus a log file that the dashboard can tail."""
    log_dir = os.path.dirname(config.log_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(config.log_path),
        ],
    )


class Mirror:
    """Main orchestrator."""

    def __init__(self, config: MirrorConfig, object_space: Optional[ObjectSpace] = None):
        self.config = config
        self._running = False
        self._stopped = asyncio.Event()

        if object_space is None:
            if config.host.objects_file:
                object_space = ObjectSpace.from_file(config.host.objects_file)
            else:
                object_space = ObjectSpace()
        self.object_space = object_space

        self.feed: Optional[HostFeed] = None
        if config.host.ws_url:
            self.feed = HostFeed(
                url=config.host.ws_url,
                object_space=self.object_space,
                reconnect_seconds=config.host.reconnect_seconds,
                ping_interval=config.host.ping_interval,
            )

        engine = config.engine
        self.controller = RebindController(
            self.object_space,
            count=engine.count,
            trigger_feedback_seconds=engine.trigger_feedback_seconds,
            debug_level=engine.debug_level,
            separator=engine.separator,
            identifiers=engine.identifiers,
        )

        self.dashboard: Optional[Dashboard] = None
        if config.dashboard.enabled:
            self.dashboard = Dashboard(
                self.controller,
                host=config.dashboard.host,
                port=config.dashboard.port,
                log_path=config.log_path,
            )

    async def start(self):
        """Full startup sequence."""
        logger.info("=" * 60)
        logger.info("   CONTROL MIRROR - STARTING")
        logger.info("=" * 60)
        self._running = True

        # 1. Resolve every configured identifier
        self.controller.start()

        # 2. Re-resolve whenever host components appear, vanish or change reachability
        self.object_space.on_topology_change(self._on_topology_change)

        # 3. Status API
        if self.dashboard is not None:
            await self.dashboard.start()

        # 4. Run until stopped
        logger.info("[BOOT] All systems go. Running...")

        tasks: List = [self._stopped.wait()]
        if self.feed is not None:
            tasks.append(self.feed.start())
        await asyncio.gather(*tasks)

    async def stop(self):
        """Graceful shutdown."""
        if not self._running:
            return
        logger.info("[SHUTDOWN] Stopping mirror...")
        self._running = False

        if self.feed is not None:
            await self.feed.stop()
        if self.dashboard is not None:
            await self.dashboard.stop()
        self.controller.teardown()
        self._stopped.set()

        logger.info("[SHUTDOWN] Complete.")

    def _on_topology_change(self):
        if not self._running:
            return
        logger.info("[HOST] Object space changed, re-resolving all slots")
        self.controller.rebind()


async def main():
    """Entry point."""
    config = MirrorConfig.from_env()
    setup_logging(config)

    mirror = Mirror(config)

    # Graceful shutdown handler
    if sys.platform != "win32":
        loop = asyncio.get_running_loop()
        def handle_signal(sig):
            logger.info(f"Received signal {sig}. Initiating shutdown...")
            asyncio.create_task(mirror.stop())

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: handle_signal(s))

    try:
        await mirror.start()
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received in main loop.")
        await mirror.stop()
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        await mirror.stop()
        sys.exit(1)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
