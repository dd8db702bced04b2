# domain/catalog.py
from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional

import yaml

from sticker_habits.domain.models import CatalogItem, Rarity
from sticker_habits.errors import CatalogError
from sticker_habits.libuniversal import CatalogKey

DEFAULT_WEIGHTS = {
    Rarity.COMMON: 70,
    Rarity.RARE: 25,
    Rarity.SUPER_RARE: 5,
}

DEFAULT_ITEMS = [
    CatalogItem("s001", "Heart", Rarity.COMMON, "#FFE0E6", "❤️"),
    CatalogItem("s002", "Star", Rarity.COMMON, "#FFF9C4", "⭐"),
    CatalogItem("s003", "Flower", Rarity.COMMON, "#FCE4EC", "🌸"),
    CatalogItem("s004", "Sunshine", Rarity.COMMON, "#FFF3E0", "☀️"),
    CatalogItem("s005", "Rainbow", Rarity.COMMON, "#E8F5E9", "🌈"),
    CatalogItem("s006", "Moon", Rarity.COMMON, "#E8EAF6", "🌙"),
    CatalogItem("s007", "Butterfly", Rarity.COMMON, "#F3E5F5", "🦋"),
    CatalogItem("s008", "Leaf", Rarity.COMMON, "#E8F5E9", "🍀"),
    CatalogItem("s009", "Bell", Rarity.COMMON, "#FFFDE7", "🔔"),
    CatalogItem("s010", "Gem", Rarity.COMMON, "#E1F5FE", "💎"),
    CatalogItem("s011", "Cake", Rarity.COMMON, "#FBE9E7", "🎂"),
    CatalogItem("s012", "Balloon", Rarity.COMMON, "#FCE4EC", "🎈"),
    CatalogItem("s013", "Unicorn", Rarity.RARE, "#EDE7F6", "🦄"),
    CatalogItem("s014", "Dragon", Rarity.RARE, "#E8F5E9", "🐉"),
    CatalogItem("s015", "Crown", Rarity.RARE, "#FFF8E1", "👑"),
    CatalogItem("s016", "Diamond", Rarity.RARE, "#E1F5FE", "💠"),
    CatalogItem("s017", "Magic", Rarity.RARE, "#F3E5F5", "✨"),
    CatalogItem("s018", "Phoenix", Rarity.RARE, "#FBE9E7", "🔥"),
    CatalogItem("s019", "Gold Star", Rarity.SUPER_RARE, "#FFF9C4", "🌟"),
    CatalogItem("s020", "Rainbow Star", Rarity.SUPER_RARE, "#F8BBD0", "🎆"),
    CatalogItem("s021", "Magic Star", Rarity.SUPER_RARE, "#E8EAF6", "🪄"),
]


class Catalog:
    """
    Read-only set of collectible stickers plus the rarity weight table.

    The weight table is ordered; RewardEngine walks it in this order when
    rolling a tier, so a catalog can be swapped without touching the engine.
    """

    def __init__(self, items: Iterable[CatalogItem], weights: Mapping[Rarity, int]):
        self._items: List[CatalogItem] = list(items)
        self._by_id: Dict[str, CatalogItem] = {}
        for item in self._items:
            if item.id in self._by_id:
                raise CatalogError(f"Duplicate catalog id '{item.id}'.")
            self._by_id[item.id] = item

        self._weights: Dict[Rarity, int] = {}
        for rarity, weight in weights.items():
            rarity = Rarity(rarity)
            if weight < 0:
                raise CatalogError(f"Weight for {rarity.value} cannot be negative.")
            self._weights[rarity] = int(weight)
        if sum(self._weights.values()) <= 0:
            raise CatalogError("Catalog weights must add up to more than zero.")

    def __len__(self) -> int:
        return len(self._items)

    @property
    def weights(self) -> Dict[Rarity, int]:
        return dict(self._weights)

    def all_items(self) -> List[CatalogItem]:
        return list(self._items)

    def by_id(self, item_id: str) -> Optional[CatalogItem]:
        return self._by_id.get(item_id)

    def by_rarity(self, rarity: Rarity) -> List[CatalogItem]:
        return [item for item in self._items if item.rarity == rarity]


def default_catalog() -> Catalog:
    return Catalog(DEFAULT_ITEMS, DEFAULT_WEIGHTS)


def catalog_from_dict(data: Mapping) -> Catalog:
    if not isinstance(data, Mapping):
        raise CatalogError("Catalog file must contain a mapping.")

    try:
        weights = {Rarity(k): int(v) for k, v in (data.get(CatalogKey.WEIGHTS.value) or {}).items()}
        items = [
            CatalogItem(
                id=str(raw["id"]),
                name=str(raw["name"]),
                rarity=Rarity(raw["rarity"]),
                color=str(raw.get("color", "#FFFFFF")),
                emoji=str(raw.get("emoji", "")),
            )
            for raw in data.get(CatalogKey.ITEMS.value) or []
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogError(f"Invalid catalog entry: {e}") from e

    if not weights:
        weights = dict(DEFAULT_WEIGHTS)
    return Catalog(items, weights)


def load_catalog(path: str) -> Catalog:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise CatalogError(f"Could not read catalog file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise CatalogError(f"Error decoding YAML from catalog file: {e}") from e
    return catalog_from_dict(data)
