"""Periodic Firefly to catalog synchronization."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..errors import PublishError
from ..models import ComponentIdentifiers, DeferredEntity, EntityMutation
from .synthesizer import EntitySynthesizer

if TYPE_CHECKING:
    from ..client import FireflyClient
    from ..config import PeriodicCheckConfig
    from .connection import ComponentRegistry, EntityProviderConnection

logger = logging.getLogger(__name__)

PROVIDER_NAME = "firefly"
LOCATION_KEY = "firefly"


class RefreshState(Enum):
    """Where the provider is in its refresh cycle."""

    IDLE = "idle"
    FETCHING = "fetching"
    TRANSFORMING = "transforming"
    PUBLISHING = "publishing"
    FAILED = "failed"


@dataclass
class RefreshResult:
    """Outcome of one refresh cycle."""

    success: bool
    message: str
    resources: int = 0
    systems: int = 0
    published: bool = False
    skipped: bool = False


class FireflyEntityProvider:
    """Imports Firefly assets into the catalog.

    Cloud accounts become System entities and cloud assets become Resource
    entities, depending on configuration. Every cycle publishes one full
    mutation, so entities that disappeared from Firefly drop out of the
    catalog on the next successful refresh.
    """

    def __init__(
        self,
        client: FireflyClient,
        component_registry: ComponentRegistry,
        config: PeriodicCheckConfig,
    ):
        self._client = client
        self._component_registry = component_registry
        self._config = config
        self._synthesizer = EntitySynthesizer(
            tag_keys_identifiers=list(config.tag_keys_identifiers),
            correlate_by_component_name=config.correlate_by_component_name,
        )
        self._connection: EntityProviderConnection | None = None
        self._state = RefreshState.IDLE
        self._lock = asyncio.Lock()
        self._timer: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()
        self.last_result: RefreshResult | None = None

    def get_provider_name(self) -> str:
        return PROVIDER_NAME

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def is_scheduled(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def connect(self, connection: EntityProviderConnection) -> None:
        """Attach the catalog connection, refresh once and schedule further refreshes.

        An interval of zero disables the schedule.
        """
        self._connection = connection
        await self.refresh()

        if self._config.interval > 0 and not self.is_scheduled:
            self._timer = asyncio.create_task(
                self._run_periodically(), name="firefly-refresh-timer"
            )
            logger.info(f"Scheduled Firefly refresh every {self._config.interval}s")

    async def stop(self) -> None:
        """Cancel the schedule and wait for a running cycle to finish."""
        if self._timer is not None:
            self._timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._timer
            self._timer = None
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def _run_periodically(self) -> None:
        while True:
            await asyncio.sleep(self._config.interval)
            task = asyncio.create_task(self.refresh())
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def refresh(self) -> RefreshResult:
        """Run one synchronization cycle.

        Failures are logged and reported in the result, never raised, so the
        schedule keeps running. A cycle requested while another one is still
        running is skipped.
        """
        if self._connection is None:
            raise RuntimeError("Firefly entity provider is not initialized")

        if self._lock.locked():
            logger.warning("Firefly refresh already in progress, skipping")
            return RefreshResult(
                success=False, message="Refresh already in progress", skipped=True
            )

        async with self._lock:
            try:
                result = await self._run_cycle(self._connection)
            except Exception as e:
                self._state = RefreshState.FAILED
                error_message = str(e)
                logger.error(
                    "Failed to refresh Firefly assets", extra={"error": error_message}
                )
                result = RefreshResult(success=False, message=error_message)
            finally:
                self._state = RefreshState.IDLE

        self.last_result = result
        return result

    async def _run_cycle(self, connection: EntityProviderConnection) -> RefreshResult:
        self._state = RefreshState.FETCHING
        logger.info("Refreshing Firefly assets")
        assets = await self._client.get_all_assets(self._config.filters)
        logger.info(f"Found {len(assets)} assets")

        components = await self.get_all_components()

        self._state = RefreshState.TRANSFORMING
        resources = []
        systems = []
        if self._config.import_resources:
            resources = self._synthesizer.synthesize_resources(assets, components)
            logger.info(f"Found {len(resources)} resources")
        if self._config.import_systems:
            systems = self._synthesizer.synthesize_systems(assets)
            logger.info(f"Found {len(systems)} systems")

        entities = [*resources, *systems]
        if not entities:
            logger.info("No entities found")
            return RefreshResult(success=True, message="No entities found")

        self._state = RefreshState.PUBLISHING
        mutation = EntityMutation(
            type="full",
            entities=[
                DeferredEntity(entity=entity, locationKey=LOCATION_KEY)
                for entity in entities
            ],
        )
        try:
            await connection.apply_mutation(mutation)
        except Exception as e:
            raise PublishError(f"Failed to apply catalog mutation: {e}") from e

        logger.info(f"Firefly refresh completed, {len(entities)} entities found")
        return RefreshResult(
            success=True,
            message=f"Published {len(entities)} entities",
            resources=len(resources),
            systems=len(systems),
            published=True,
        )

    async def get_all_components(self) -> list[ComponentIdentifiers]:
        """Snapshot of catalog components; empty if the lookup fails."""
        try:
            return await self._component_registry.get_components()
        except Exception as e:
            logger.error(f"Failed to fetch components: {e}")
            return []
