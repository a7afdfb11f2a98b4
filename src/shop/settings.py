"""Runtime settings read from the environment.

Protean's own configuration (providers, processing mode) lives in
``[tool.protean]`` of ``pyproject.toml``; these are the shop-level knobs.
"""

import os
from dataclasses import dataclass

DEFAULT_CHECKPOINT_INTERVAL = 300  # seconds


@dataclass(frozen=True)
class ShopSettings:
    admin_id: str | None = None
    data_dir: str = "data"
    default_language: str = "fr"
    checkpoint_interval: float = DEFAULT_CHECKPOINT_INTERVAL

    @classmethod
    def from_env(cls) -> "ShopSettings":
        return cls(
            admin_id=os.getenv("SHOP_ADMIN_ID") or None,
            data_dir=os.getenv("SHOP_DATA_DIR", "data"),
            default_language=os.getenv("SHOP_DEFAULT_LANGUAGE", "fr"),
            checkpoint_interval=float(os.getenv("SHOP_CHECKPOINT_INTERVAL", DEFAULT_CHECKPOINT_INTERVAL)),
        )

    def is_admin(self, caller_id) -> bool:
        """Administrator check: a plain comparison of identifiers."""
        return self.admin_id is not None and str(caller_id) == self.admin_id
