"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from caltrax.adapters.json_file_store import JsonFileStore
from caltrax.adapters.openai_vision_client import OpenAIVisionClient
from caltrax.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from caltrax.adapters.supabase_food_entry_repository import (
    SupabaseFoodEntryRepository,
)
from caltrax.adapters.supabase_profile_repository import SupabaseProfileRepository
from caltrax.adapters.supabase_subscription_repository import (
    SupabaseSubscriptionRepository,
)
from caltrax.config import Settings
from caltrax.services.barcode import BarcodeService
from caltrax.services.cache import InMemoryCache
from caltrax.services.ledger import MacroLedger
from caltrax.services.profiles import ProfileService
from caltrax.services.subscriptions import SubscriptionService
from caltrax.services.sync import RemoteSync
from caltrax.services.vision import VisionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    remote_sync: RemoteSync
    ledger: MacroLedger
    profile_service: ProfileService
    vision_service: VisionService
    barcode_service: BarcodeService
    subscription_service: SubscriptionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    store = JsonFileStore.create(resolved_settings.local_store_dir)
    remote_sync = RemoteSync(
        store=store,
        entry_repository=SupabaseFoodEntryRepository(supabase_client),
        profile_repository=SupabaseProfileRepository(supabase_client),
        timeout_seconds=resolved_settings.remote_sync_timeout_seconds,
    )
    openai_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
    vision_service = VisionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    openfoodfacts_client = HttpxOpenFoodFactsClient.create(
        resolved_settings.openfoodfacts_base_url
    )
    barcode_service = BarcodeService(
        client=openfoodfacts_client,
        cache=InMemoryCache(),
    )

    async def close_resources() -> None:
        await openfoodfacts_client.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        remote_sync=remote_sync,
        ledger=MacroLedger(store=store, remote_sync=remote_sync),
        profile_service=ProfileService(store=store, remote_sync=remote_sync),
        vision_service=vision_service,
        barcode_service=barcode_service,
        subscription_service=SubscriptionService(
            SupabaseSubscriptionRepository(supabase_client)
        ),
        close_resources=close_resources,
    )
