"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from caltrax.config import Settings
from caltrax.containers import AppContainer
from caltrax.services.barcode import BarcodeService
from caltrax.services.cache import InMemoryCache
from caltrax.services.ledger import MacroLedger
from caltrax.services.profiles import ProfileService
from caltrax.services.storage import InMemoryStore
from caltrax.services.subscriptions import SubscriptionRepository, SubscriptionService
from caltrax.services.sync import (
    FoodEntryRemoteRepository,
    ProfileRemoteRepository,
    RemoteSync,
)
from caltrax.services.vision import VisionClient, VisionService


@dataclass
class InMemoryFoodEntryRepository(FoodEntryRemoteRepository):
    """In-memory remote entry store for tests."""

    rows: dict[str, dict[str, object]] = field(default_factory=dict)
    days: dict[str, str] = field(default_factory=dict)
    owners: dict[str, str] = field(default_factory=dict)
    fail: bool = False
    calls: list[str] = field(default_factory=list)

    def upsert_entry(self, user_id: str, day: str, entry: dict[str, object]) -> None:
        self.calls.append(f"upsert:{entry['id']}")
        if self.fail:
            raise RuntimeError("remote unavailable")
        entry_id = str(entry["id"])
        self.rows[entry_id] = entry
        self.days[entry_id] = day
        self.owners[entry_id] = user_id

    def delete_entry(self, user_id: str, entry_id: str) -> None:
        self.calls.append(f"delete:{entry_id}")
        if self.fail:
            raise RuntimeError("remote unavailable")
        self.rows.pop(entry_id, None)

    def list_entries(self, user_id: str, day: str) -> list[dict[str, object]]:
        if self.fail:
            raise RuntimeError("remote unavailable")
        return [
            row
            for entry_id, row in self.rows.items()
            if self.days[entry_id] == day and self.owners[entry_id] == user_id
        ]

    def list_entries_range(
        self, user_id: str, start: str, end: str
    ) -> list[dict[str, object]]:
        self.calls.append(f"range:{start}:{end}")
        if self.fail:
            raise RuntimeError("remote unavailable")
        return [
            {**row, "date": self.days[entry_id]}
            for entry_id, row in self.rows.items()
            if start <= self.days[entry_id] <= end
            and self.owners[entry_id] == user_id
        ]


@dataclass
class InMemoryProfileRepository(ProfileRemoteRepository):
    """In-memory remote profile store for tests."""

    profiles: dict[str, dict[str, object]] = field(default_factory=dict)
    fail: bool = False

    def upsert_profile(self, user_id: str, profile: dict[str, object]) -> None:
        if self.fail:
            raise RuntimeError("remote unavailable")
        self.profiles[user_id] = profile

    def get_profile(self, user_id: str) -> dict[str, object] | None:
        if self.fail:
            raise RuntimeError("remote unavailable")
        return self.profiles.get(user_id)


@dataclass
class InMemorySubscriptionRepository(SubscriptionRepository):
    """In-memory subscription statuses for tests."""

    statuses: dict[str, str] = field(default_factory=dict)

    def get_status(self, user_id: str) -> str | None:
        return self.statuses.get(user_id)


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "name": "Chicken salad",
            "nutrition": {
                "calories": 420,
                "protein_g": 35,
                "fat_g": 18,
                "carbs_g": 22,
            },
            "pros": ["High protein"],
            "cons": ["Dressing adds fat"],
            "health_score": 8,
            "confidence": 0.82,
        }
    )
    prompts: list[str] = field(default_factory=list)

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.prompts.append(prompt)
        return self.payload


@dataclass
class FakeOpenFoodFactsClient:
    """Fake Open Food Facts client with in-memory products."""

    products: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "9876543210987": {
                "product_name": "Greek Yogurt (Plain)",
                "brands": "Fage, Total",
                "serving_size": "170 g",
                "nutriscore_grade": "a",
                "nutriments": {
                    "energy-kcal_serving": 100,
                    "proteins_serving": 17,
                    "fat_serving": 0,
                    "carbohydrates_serving": 6,
                    "energy-kcal_100g": 59,
                },
            }
        }
    )
    calls: int = 0
    failures: int = 0

    async def get_product(self, barcode: str) -> dict[str, object]:
        self.calls += 1
        if self.failures:
            self.failures -= 1
            raise RuntimeError("temporary failure")
        product = self.products.get(barcode)
        if product is None:
            return {"status": 0}
        return {"status": 1, "product": product}


def build_remote_sync(
    store: InMemoryStore | None = None,
    entries: InMemoryFoodEntryRepository | None = None,
    profiles: InMemoryProfileRepository | None = None,
) -> RemoteSync:
    return RemoteSync(
        store=store or InMemoryStore(),
        entry_repository=entries or InMemoryFoodEntryRepository(),
        profile_repository=profiles or InMemoryProfileRepository(),
        timeout_seconds=1.0,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def entry_repository() -> InMemoryFoodEntryRepository:
    return InMemoryFoodEntryRepository()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def subscription_repository() -> InMemorySubscriptionRepository:
    return InMemorySubscriptionRepository(statuses={"user_paid": "active"})


@pytest.fixture
def remote_sync(
    store: InMemoryStore,
    entry_repository: InMemoryFoodEntryRepository,
    profile_repository: InMemoryProfileRepository,
) -> RemoteSync:
    return build_remote_sync(store, entry_repository, profile_repository)


@pytest.fixture
def ledger(store: InMemoryStore, remote_sync: RemoteSync) -> MacroLedger:
    return MacroLedger(store=store, remote_sync=remote_sync)


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryStore,
    remote_sync: RemoteSync,
    ledger: MacroLedger,
    subscription_repository: InMemorySubscriptionRepository,
) -> AppContainer:
    vision_service = VisionService(
        client=FakeVisionClient(),
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )
    barcode_service = BarcodeService(
        client=FakeOpenFoodFactsClient(),
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        remote_sync=remote_sync,
        ledger=ledger,
        profile_service=ProfileService(store=store, remote_sync=remote_sync),
        vision_service=vision_service,
        barcode_service=barcode_service,
        subscription_service=SubscriptionService(subscription_repository),
        close_resources=close_resources,
    )
