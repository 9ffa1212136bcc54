"""Tests for user-facing pantry actions."""

from datetime import UTC, date, datetime

import pytest

from pantry_tracker.core.errors import ErrorCode
from pantry_tracker.domain.item import ItemIdentifier, SourceKind, to_epoch_ms
from pantry_tracker.models.service_models import ProductLookupResult
from pantry_tracker.services.item_store import ItemStore
from pantry_tracker.services.notification_scheduler import NotificationScheduler
from pantry_tracker.services.pantry_service import PantryService
from tests.unit.mocks import FailingBlobStore, FakeNotificationPlatform


MILK = ProductLookupResult(title="Milk", weight_label="1 L", image_reference="https://img.example/milk.png")


@pytest.fixture
def failing_store():
    return FailingBlobStore()


@pytest.fixture
def failing_service(failing_store, clock):
    item_store = ItemStore(failing_store)
    scheduler = NotificationScheduler(
        platform=FakeNotificationPlatform(),
        blob_store=failing_store,
        item_store=item_store,
        clock=clock,
    )
    return PantryService(store=item_store, scheduler=scheduler, clock=clock, expiration_hour=9, timezone="UTC")


@pytest.mark.unit
class TestSaveItems:
    """Tests for saving scanned and manual items."""

    async def test_save_scanned_item(self, pantry_service, item_store):
        result = await pantry_service.save_scanned_item(scan_code="4006381333931", product=MILK)

        assert result.ok
        assert result.record.title == "Milk"
        assert result.record.weight_label == "1 L"
        assert result.record.source_kind == SourceKind.SCANNED
        assert result.items == [result.record]
        assert await item_store.load_all() == [result.record]

    async def test_product_not_found_requests_manual_entry(self, pantry_service, item_store):
        result = await pantry_service.save_scanned_item(scan_code="123", product=None)

        assert result.needs_manual_entry is True
        assert result.ok
        assert await item_store.load_all() == []

    async def test_save_manual_item(self, pantry_service):
        result = await pantry_service.save_manual_item(title=" Soup ", inline_image="data:image/png;base64,AAAA")

        assert result.ok
        assert result.record.title == "Soup"
        assert result.record.scan_code == "no-code"
        assert result.record.weight_display == "Not specified"
        assert result.record.image == "data:image/png;base64,AAAA"

    async def test_manual_items_get_distinct_identifiers(self, pantry_service):
        first = await pantry_service.save_manual_item(title="Soup")
        second = await pantry_service.save_manual_item(title="Soup")

        assert first.record.identifier != second.record.identifier
        assert len(second.items) == 2

    async def test_empty_title_alerts_and_stores_nothing(self, pantry_service, item_store):
        await pantry_service.save_manual_item(title="Soup")

        result = await pantry_service.save_manual_item(title="   ")

        assert result.alert.code == ErrorCode.ERR_INVALID_ITEM
        assert [item.title for item in result.items] == ["Soup"]
        assert len(await item_store.load_all()) == 1

    async def test_storage_failure_keeps_last_known_items(self, failing_service, failing_store):
        failing_store.fail_writes = False
        await failing_service.save_manual_item(title="Soup")
        failing_store.fail_writes = True

        result = await failing_service.save_manual_item(title="Beans")

        assert result.alert.code == ErrorCode.ERR_STORAGE_UNAVAILABLE
        assert [item.title for item in result.items] == ["Soup"]


@pytest.mark.unit
class TestExpirationAndDeletion:
    """Tests for changing and removing items."""

    async def test_set_expiration_uses_reminder_hour(self, pantry_service):
        saved = await pantry_service.save_manual_item(title="Bread")

        result = await pantry_service.set_expiration(identifier=saved.record.identifier, day=date(2026, 3, 12))

        assert result.ok
        assert result.record.expiration_instant == to_epoch_ms(datetime(2026, 3, 12, 9, 0, tzinfo=UTC))

    async def test_set_expiration_reorders(self, pantry_service):
        bread = (await pantry_service.save_manual_item(title="Bread")).record
        await pantry_service.save_manual_item(title="Rice")

        result = await pantry_service.set_expiration(identifier=bread.identifier, day=date(2026, 3, 11))

        assert [item.title for item in result.items] == ["Bread", "Rice"]

    async def test_clear_expiration(self, pantry_service):
        saved = await pantry_service.save_manual_item(title="Bread")
        await pantry_service.set_expiration(identifier=saved.record.identifier, day=date(2026, 3, 11))

        result = await pantry_service.set_expiration_instant(identifier=saved.record.identifier, expiration_instant=None)

        assert result.record.has_expiration is False

    async def test_set_expiration_on_missing_item(self, pantry_service):
        result = await pantry_service.set_expiration(identifier=ItemIdentifier("gone", 1), day=date(2026, 3, 11))

        assert result.alert.code == ErrorCode.ERR_ITEM_NOT_FOUND
        assert result.alert.message == "That item is no longer in your pantry."

    async def test_delete_item(self, pantry_service):
        soup = (await pantry_service.save_manual_item(title="Soup")).record
        await pantry_service.save_manual_item(title="Beans")

        result = await pantry_service.delete_item(identifier=soup.identifier)

        assert result.ok
        assert [item.title for item in result.items] == ["Beans"]

    async def test_delete_absent_item_succeeds(self, pantry_service):
        result = await pantry_service.delete_item(identifier=ItemIdentifier("gone", 1))

        assert result.ok
        assert result.items == []

    async def test_clear_items(self, pantry_service, item_store):
        await pantry_service.save_manual_item(title="Soup")

        result = await pantry_service.clear_items()

        assert result.ok
        assert result.items == []
        assert await item_store.load_all() == []


@pytest.mark.unit
class TestLoadAndIngredients:
    """Tests for loading the collection and building ingredient lists."""

    async def test_corrupt_store_loads_empty_with_alert(self, pantry_service, blob_store):
        await blob_store.set("scannedItems", "{broken")

        result = await pantry_service.load_items()

        assert result.items == []
        assert result.alert.code == ErrorCode.ERR_STORE_CORRUPT
        assert result.alert.message == "Failed to load items from storage."

    async def test_unreachable_store_loads_empty_with_alert(self, failing_service, failing_store):
        failing_store.fail_reads = True

        result = await failing_service.load_items()

        assert result.items == []
        assert result.alert.code == ErrorCode.ERR_STORAGE_UNAVAILABLE

    async def test_ingredient_list(self, pantry_service):
        milk = (await pantry_service.save_scanned_item(scan_code="1", product=MILK)).record
        await pantry_service.save_manual_item(title="Bread")
        await pantry_service.set_expiration(identifier=milk.identifier, day=date(2026, 3, 12))

        summary = await pantry_service.build_ingredient_list()

        assert summary.items_list == "Milk (expires: 2026-03-12), Bread"
        assert summary.expiring_items == "Milk (expires: 2026-03-12)"
        assert summary.item_count == 2

    async def test_ingredient_list_in_added_order(self, pantry_service):
        await pantry_service.save_manual_item(title="Bread")
        rice = (await pantry_service.save_manual_item(title="Rice")).record
        await pantry_service.set_expiration(identifier=rice.identifier, day=date(2026, 3, 12))

        summary = await pantry_service.build_ingredient_list(prioritize_expiring=False)

        assert summary.items_list == "Bread, Rice (expires: 2026-03-12)"


@pytest.mark.unit
class TestReminderTracking:
    """Tests for keeping the armed reminder in step with the collection."""

    async def test_saving_item_refreshes_reminder(self, pantry_service, notification_scheduler, platform):
        await notification_scheduler.initialize()

        saved = await pantry_service.save_manual_item(title="Milk")
        await pantry_service.set_expiration(identifier=saved.record.identifier, day=date(2026, 3, 11))

        content = platform.only_trigger["content"]
        assert content.body == "Milk expires in the next 3 days!"

    async def test_deleting_item_refreshes_reminder(self, pantry_service, notification_scheduler, platform):
        saved = await pantry_service.save_manual_item(title="Milk")
        await pantry_service.set_expiration(identifier=saved.record.identifier, day=date(2026, 3, 11))
        await notification_scheduler.initialize()

        await pantry_service.delete_item(identifier=saved.record.identifier)

        assert platform.only_trigger["content"].data["expiringCount"] == 0

    async def test_changes_do_not_arm_disarmed_reminder(self, pantry_service, platform):
        await pantry_service.save_manual_item(title="Milk")

        assert platform.triggers == {}
