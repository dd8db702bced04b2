from __future__ import annotations

from datetime import datetime
from typing import Sequence

import pytest

from sticker_habits.domain.catalog import Catalog, default_catalog
from sticker_habits.domain.models import CatalogItem, Rarity
from sticker_habits.domain.rewards import RewardEngine
from sticker_habits.storage import EncryptedJsonStorage, generate_key
from sticker_habits.store import AppStateStore


class ScriptedRandom:
    """Random source with a fixed tier roll; ``choice`` picks by index."""

    def __init__(self, roll: float = 0.0, index: int = 0):
        self.roll = roll
        self.index = index
        self.pools: list[list] = []

    def random(self) -> float:
        return self.roll

    def choice(self, seq: Sequence):
        self.pools.append(list(seq))
        return seq[self.index % len(seq)]


class FailingStorage:
    """Storage that loads empty and fails every save while ``fail`` is set."""

    def __init__(self):
        self.path = "memory"
        self.fail = False
        self.saved: list[dict] = []

    def load(self, default=None):
        return dict(default or {})

    def save(self, data):
        from sticker_habits.errors import PersistenceError
        if self.fail:
            raise PersistenceError("disk full")
        self.saved.append(data)


NOW = datetime(2024, 5, 10, 9, 30, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def catalog() -> Catalog:
    return default_catalog()


@pytest.fixture
def small_catalog() -> Catalog:
    return Catalog(
        [
            CatalogItem("c1", "One", Rarity.COMMON, "#FFFFFF"),
            CatalogItem("c2", "Two", Rarity.COMMON, "#FFFFFF"),
            CatalogItem("r1", "Rare", Rarity.RARE, "#FFFFFF"),
            CatalogItem("s1", "Super", Rarity.SUPER_RARE, "#FFFFFF"),
        ],
        {Rarity.COMMON: 70, Rarity.RARE: 25, Rarity.SUPER_RARE: 5},
    )


@pytest.fixture
def storage(tmp_path) -> EncryptedJsonStorage:
    return EncryptedJsonStorage(str(tmp_path / "storage.dat"), generate_key())


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def store(storage, catalog, rng) -> AppStateStore:
    return AppStateStore.open(storage, catalog=catalog, engine=RewardEngine(catalog, rng))


@pytest.fixture
def make_rng():
    return ScriptedRandom


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()
