# domain/rewards.py
from __future__ import annotations
import logging
import random
from typing import Iterable, Optional

from sticker_habits.domain.catalog import Catalog
from sticker_habits.domain.models import CatalogItem, Rarity

logger = logging.getLogger(__name__)

class RewardEngine:
    """
    Weighted sticker draw over a catalog.

    ``rng`` only needs ``random()`` and ``choice()``; tests pass a scripted
    source to pin the tier roll and the pick.
    """

    def __init__(self, catalog: Catalog, rng: Optional[random.Random] = None):
        self.catalog = catalog
        self.rng = rng if rng is not None else random.Random()

    def sample_tier(self) -> Rarity:
        weights = self.catalog.weights
        total = sum(weights.values())
        roll = self.rng.random() * total

        cumulative = 0
        for rarity, weight in weights.items():
            cumulative += weight
            if roll < cumulative:
                return rarity
        # roll == total can only come from a non-conforming source
        return list(weights)[-1]

    def draw(self, owned_item_ids: Iterable[str]) -> Optional[CatalogItem]:
        """Return an unowned item, or None when the whole catalog is owned."""
        owned = set(owned_item_ids)
        unowned = [item for item in self.catalog.all_items() if item.id not in owned]
        if not unowned:
            return None

        tier = self.sample_tier()
        pool = [item for item in unowned if item.rarity == tier]
        if not pool:
            logger.debug("Tier %s fully owned, drawing from any unowned sticker", tier.value)
            pool = unowned

        return self.rng.choice(pool)
