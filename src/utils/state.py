from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from db.store import SEED_PRODUCTS, SqliteStore
from insights.provider import GeminiInsightsProvider, InsightsProvider
from pos.register import Register
from utils.config import Settings


@dataclass
class GlobalState:
    """
    Centralized application state shared by screens.

    Fields:
      - settings: runtime configuration
      - register: the open register session (None until open() ran)
      - insights: advisory text provider, injected so tests can swap it
    """

    settings: Settings = field(default_factory=Settings)
    register: Optional[Register] = None
    insights: Optional[InsightsProvider] = None

    async def open(self) -> Register:
        """Open the register on the configured store, seeding an empty catalog."""
        if self.insights is None:
            self.insights = GeminiInsightsProvider(
                self.settings.gemini_api_key,
                model=self.settings.gemini_model,
                timeout=self.settings.insights_timeout,
            )
        store = SqliteStore(self.settings.db_path)
        self.register = await Register.open(store, seed=SEED_PRODUCTS)
        return self.register
