"""
Block Factory.

Builds content blocks with a run-scoped unique id, a private copy of the
default style and creation/update timestamps. The random source and clock
are injectable so a seeded factory yields reproducible ids.
"""

from __future__ import annotations

import copy
import random
import string
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from .models import BlockType, ContentBlock

DEFAULT_BLOCK_STYLE: dict[str, Any] = {
    "marginTop": 16,
    "marginBottom": 16,
    "padding": 16,
    "backgroundColor": "rgba(255, 255, 255, 0.05)",
    "borderRadius": 12,
    "border": "1px solid rgba(255, 255, 255, 0.1)",
}

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 9

# Clock of seeded factories unless one is given
SEEDED_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BlockFactory:
    """
    Creates ContentBlocks for one migration run.

    Ids look like `<epoch-millis>-<9 base-36 chars>` and never repeat within
    the factory. Uniqueness is not global: two factories may collide.

    Usage:
        factory = BlockFactory(rng=random.Random(42))
        block = factory.create_block(BlockType.TEXT, {"text": "Hello"})
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._rng = rng or random.Random()
        self._clock = clock
        self._issued: set[str] = set()

    @classmethod
    def seeded(cls, seed: int, clock: Callable[[], datetime] | None = None) -> BlockFactory:
        """
        Factory whose ids and timestamps are reproducible for a given seed.

        Without an explicit clock every block is stamped with SEEDED_EPOCH.
        """
        return cls(rng=random.Random(seed), clock=clock or (lambda: SEEDED_EPOCH))

    def now(self) -> str:
        """Current timestamp from the factory clock, ISO-8601."""
        return self._clock().isoformat()

    def new_id(self) -> str:
        millis = int(self._clock().timestamp() * 1000)
        while True:
            suffix = "".join(self._rng.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
            candidate = f"{millis}-{suffix}"
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate

    def create_block(self, block_type: BlockType | str, content: dict[str, Any]) -> ContentBlock:
        """
        Create a single typed content block.

        Args:
            block_type: Kind of block; must be in the BlockType allow-list
            content: Kind-specific payload (copied, never shared)

        Returns:
            A fresh ContentBlock
        """
        kind = BlockType(block_type)
        timestamp = self.now()
        return ContentBlock(
            id=self.new_id(),
            type=kind,
            content=copy.deepcopy(content),
            style=dict(DEFAULT_BLOCK_STYLE),
            created=timestamp,
            updated=timestamp,
        )

    # Shorthands used by the transformers

    def heading(self, text: str, level: int = 1) -> ContentBlock:
        return self.create_block(BlockType.HEADING, {"text": text, "level": level})

    def text(self, text: str) -> ContentBlock:
        return self.create_block(BlockType.TEXT, {"text": text})
