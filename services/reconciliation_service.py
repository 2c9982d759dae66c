"""
Two-way inventory reconciliation between Marianatek and Webflow.

A cycle runs two passes, in this order:

1. Marianatek → Webflow (restocks): when a variant's Marianatek quantity
   differs from the last recorded one, Webflow is set to it absolutely.
2. Webflow → Marianatek (sales): the change in Webflow quantity since the
   last recorded one is applied to Marianatek as a relative adjustment.

The restock pass always completes before the sales pass starts. Every
processed pair gets a fresh snapshot and starts its throttle cooldown,
pushed or not.

Pushes are not idempotent. If the process dies after a push but before
the state file is saved, the next cycle re-applies the same change.
"""

import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional
import structlog

from config.settings import Settings, get_settings
from exceptions import MalformedResponseError, PerEntitySyncError
from integrations.marianatek import MarianatekClient
from integrations.webflow import WebflowClient
from models.mapping import MappingIndex
from models.sync import (
    CycleResult,
    PairSnapshot,
    PassResult,
    SyncDirection,
    SyncStatus,
)
from services.mapping_service import MappingService
from services.quantity_service import FallbackUsed, extract_quantity
from services.sync_log_service import SyncLogService
from services.sync_state_service import SyncStateStore
from services.throttle_service import SyncThrottle

logger = structlog.get_logger(__name__)


class ReconciliationEngine:
    """
    Drives both reconciliation passes over the mapped pairs.

    State (snapshots, throttle) is owned by the objects passed in, so the
    same engine can be driven by the scheduler, the CLI, or tests.
    """

    def __init__(
        self,
        marianatek: MarianatekClient,
        webflow: WebflowClient,
        mapping_service: MappingService,
        state: SyncStateStore,
        throttle: SyncThrottle,
        event_log: SyncLogService,
        default_location_id: str,
        entity_delay: float = 0.3,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.marianatek = marianatek
        self.webflow = webflow
        self.mapping_service = mapping_service
        self.state = state
        self.throttle = throttle
        self.event_log = event_log
        self.default_location_id = default_location_id
        self.entity_delay = entity_delay
        self.sleep = sleep

    # ===================
    # CYCLE
    # ===================

    def run_cycle(self) -> CycleResult:
        """
        Run one full cycle and persist state.

        Returns:
            CycleResult with per-pass counters

        Raises:
            MappingSourceError: If the mapping cannot be loaded
            MalformedResponseError / RemoteApiError: If a full fetch fails
            StateStoreError: If state cannot be saved
        """
        result = CycleResult(started_at=datetime.now(timezone.utc))
        logger.info("sync_cycle_starting")

        mapping = self.mapping_service.load()
        result.mapping_entries = len(mapping)

        result.passes.append(self.sync_marianatek_to_webflow(mapping))
        result.passes.append(self.sync_webflow_to_marianatek(mapping))

        self.state.save()

        result.finished_at = datetime.now(timezone.utc)
        result.pairs_tracked = len(self.state)
        logger.info(
            "sync_cycle_completed",
            mapping_entries=result.mapping_entries,
            pushed=sum(p.pushed for p in result.passes),
            errors=sum(len(p.errors) for p in result.passes),
            pairs_tracked=result.pairs_tracked,
            duration_seconds=round((result.finished_at - result.started_at).total_seconds(), 2)
        )
        return result

    # ===================
    # MARIANATEK → WEBFLOW
    # ===================

    def sync_marianatek_to_webflow(self, mapping: MappingIndex) -> PassResult:
        """
        Propagate restocks: absolute Webflow update when Marianatek changed.

        Args:
            mapping: Mapping entries for this cycle

        Returns:
            PassResult for the pass
        """
        direction = SyncDirection.MARIANATEK_TO_WEBFLOW
        result = PassResult(direction=direction)

        variants = self.marianatek.fetch_all_variants()
        result.fetched = len(variants)

        for variant in variants:
            variant_id = variant.get("id")
            entry = mapping.for_marianatek(variant_id)
            if entry is None:
                result.skipped_unmapped += 1
                logger.debug("entity_unmapped", direction=direction.value, entity_id=variant_id)
                continue

            key = entry.key
            try:
                marianatek_qty = self._marianatek_quantity(variant, entry.marianatek_variant_id)
                if not self._may_sync(key, result):
                    continue

                webflow_qty = self.webflow.fetch_inventory(entry.webflow_variant_id)
                # Validated before any push
                current = PairSnapshot(webflow=webflow_qty, marianatek=marianatek_qty)
                previous = self.state.get(key) or current

                if marianatek_qty != previous.marianatek:
                    self.webflow.update_inventory(entry.webflow_variant_id, marianatek_qty)
                    result.pushed += 1
                    self.event_log.log(
                        direction,
                        entry.marianatek_variant_id,
                        SyncStatus.SUCCESS,
                        f"Updated Webflow to {marianatek_qty} (was {previous.marianatek})"
                    )

                self._finish_pair(key, current, result)
            except Exception as e:
                self._entity_failed(direction, entry.marianatek_variant_id, e, result)

        self._log_pass(result)
        return result

    # ===================
    # WEBFLOW → MARIANATEK
    # ===================

    def sync_webflow_to_marianatek(self, mapping: MappingIndex) -> PassResult:
        """
        Propagate sales: relative Marianatek adjustment by the Webflow delta.

        Args:
            mapping: Mapping entries for this cycle

        Returns:
            PassResult for the pass
        """
        direction = SyncDirection.WEBFLOW_TO_MARIANATEK
        result = PassResult(direction=direction)

        skus = self.webflow.fetch_all_skus()
        result.fetched = len(skus)

        for sku in skus:
            entry = mapping.for_webflow(sku.get("id"))
            if entry is None:
                result.skipped_unmapped += 1
                logger.debug("entity_unmapped", direction=direction.value, entity_id=sku.get("id"))
                continue

            key = entry.key
            if not self._may_sync(key, result):
                continue

            try:
                webflow_qty = self.webflow.fetch_inventory(entry.webflow_variant_id)
                variant = self.marianatek.fetch_variant(entry.marianatek_variant_id)
                marianatek_qty = self._marianatek_quantity(variant, entry.marianatek_variant_id)
                # Validated before any push
                current = PairSnapshot(webflow=webflow_qty, marianatek=marianatek_qty)
                previous = self.state.get(key) or current

                delta = webflow_qty - previous.webflow
                if delta != 0:
                    location_id = entry.location_id or self.default_location_id
                    self.marianatek.adjust_inventory(entry.marianatek_variant_id, delta, location_id)
                    result.pushed += 1
                    self.event_log.log(
                        direction,
                        entry.webflow_variant_id,
                        SyncStatus.SUCCESS,
                        f"Adjusted Marianatek by {delta} (new Webflow qty: {webflow_qty})"
                    )

                self._finish_pair(key, current, result)
            except Exception as e:
                self._entity_failed(direction, entry.webflow_variant_id, e, result)

        self._log_pass(result)
        return result

    # ===================
    # HELPERS
    # ===================

    def _may_sync(self, key: str, result: PassResult) -> bool:
        if self.throttle.can_sync(key):
            return True
        result.skipped_throttled += 1
        logger.debug(
            "pair_throttled",
            key=key,
            direction=result.direction.value,
            remaining_seconds=round(self.throttle.remaining(key), 1)
        )
        return False

    def _marianatek_quantity(self, variant: dict[str, Any], variant_id: str) -> int:
        attributes = variant.get("attributes")
        if not isinstance(attributes, dict):
            raise MalformedResponseError("marianatek", f"Variant {variant_id} has no attributes")

        extracted = extract_quantity(attributes)
        if isinstance(extracted, FallbackUsed):
            self.event_log.log(
                SyncDirection.INFO,
                variant_id,
                SyncStatus.WARNING,
                "Using fallback inventory_quantity"
            )
        return extracted.quantity

    def _finish_pair(self, key: str, snapshot: PairSnapshot, result: PassResult) -> None:
        # Recorded whether or not anything was pushed
        self.state.record(key, snapshot)
        self.throttle.mark(key)
        result.processed += 1
        if self.entity_delay > 0:
            self.sleep(self.entity_delay)

    def _entity_failed(
        self,
        direction: SyncDirection,
        entity_id: str,
        error: Exception,
        result: PassResult
    ) -> None:
        failure = PerEntitySyncError(direction.value, entity_id, str(error))
        result.errors.append({
            "entity_id": entity_id,
            "message": failure.message,
            "error_type": type(error).__name__,
        })
        logger.error(
            "entity_sync_failed",
            direction=direction.value,
            entity_id=entity_id,
            error=str(error),
            error_type=type(error).__name__
        )
        self.event_log.log(direction, entity_id, SyncStatus.ERROR, failure.message)

    def _log_pass(self, result: PassResult) -> None:
        logger.info(
            "sync_pass_completed",
            direction=result.direction.value,
            fetched=result.fetched,
            processed=result.processed,
            pushed=result.pushed,
            skipped_unmapped=result.skipped_unmapped,
            skipped_throttled=result.skipped_throttled,
            errors=len(result.errors)
        )


def build_reconciliation_engine(settings: Settings) -> ReconciliationEngine:
    """
    Wire clients, state and throttle from settings.

    Loads the persisted state immediately, so a corrupt state file fails
    at startup.
    """
    event_log = SyncLogService(settings.sync_log_file)
    state = SyncStateStore(settings.state_file)
    state.load()

    return ReconciliationEngine(
        marianatek=MarianatekClient.from_settings(settings, event_log=event_log),
        webflow=WebflowClient.from_settings(settings, event_log=event_log),
        mapping_service=MappingService(settings.mapping_file),
        state=state,
        throttle=SyncThrottle(settings.throttle_seconds),
        event_log=event_log,
        default_location_id=settings.default_location_id,
        entity_delay=settings.request_delay_seconds,
    )


# Singleton instance for convenience
_reconciliation_engine: Optional[ReconciliationEngine] = None


def get_reconciliation_engine() -> ReconciliationEngine:
    """Get or create the ReconciliationEngine instance."""
    global _reconciliation_engine
    if _reconciliation_engine is None:
        _reconciliation_engine = build_reconciliation_engine(get_settings())
    return _reconciliation_engine
