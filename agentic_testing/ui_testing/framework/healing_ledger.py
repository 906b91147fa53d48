"""
================================================================================
Healing Ledger
================================================================================

Durable, append-only record of every successful locator heal plus the
in-memory cache (original selector -> last healed selector) derived from it.

File format (healed-locators.json):
    [
      {
        "original": "#login-btn",
        "healed": "[data-testid=\"login-btn\"]",
        "strategy": {"type": "testId", "selector": "[data-testid=\"login-btn\"]"},
        "timestamp": "2024-05-01T10:00:00+00:00",
        "success": true
      }
    ]

Features:
    - Loads prior heals at construction and seeds the cache
    - Rewrites the whole file after each heal (pretty-printed)
    - Cross-process safe writes using filelock; records written by other
      workers since our last write are merged, not dropped
    - Unreadable files are copied aside before a fresh ledger starts

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from filelock import FileLock, Timeout
from loguru import logger

from .strategy_generator import LocatorStrategy


HEALED_LOCATORS_FILE = "healed-locators.json"

# Seconds to wait for another worker holding the ledger lock
LOCK_TIMEOUT = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse ISO-8601, including the trailing `Z` form."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class HealedLocator:
    """
    One successful heal.

    Attributes:
        original: Selector that failed to resolve
        healed: Selector that resolved instead
        strategy: Strategy that produced the healed selector
        timestamp: When the heal happened (UTC)
        success: Always True for persisted records
    """
    original: str
    healed: str
    strategy: LocatorStrategy
    timestamp: datetime = field(default_factory=_utcnow)
    success: bool = True

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.original, self.healed, self.timestamp.isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "healed": self.healed,
            "strategy": self.strategy.to_dict(),
            "timestamp": self.timestamp.isoformat(),
            "success": self.success,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealedLocator":
        return cls(
            original=str(data["original"]),
            healed=str(data["healed"]),
            strategy=LocatorStrategy.from_dict(data["strategy"]),
            timestamp=parse_timestamp(str(data["timestamp"])),
            success=bool(data.get("success", True)),
        )


class HealingLedger:
    """
    In-memory ledger of heals, backed by a JSON file.

    The cache is a derived index: every cached original selector has at
    least one record in the ledger. Records are kept in chronological order
    and never de-duplicated.

    Usage:
        >>> ledger = HealingLedger(Path("test-results/healed-locators.json"))
        >>> ledger.cached_selector("#login-btn")
        '[data-testid="login-btn"]'
        >>> ledger.append(HealedLocator(original, healed, strategy))
    """

    def __init__(self, path: Union[str, Path], persist: bool = True) -> None:
        """
        Initialize the ledger and load prior heals.

        Args:
            path: Healing-record file location
            persist: Whether appends are written back to the file
        """
        self.path = Path(path)
        self.persist = persist
        self._lock_path = self.path.with_name(self.path.name + ".lock")
        self._records: List[HealedLocator] = []
        self._cache: Dict[str, str] = {}
        self._replace_on_flush = False
        self.load()

    @classmethod
    def in_directory(cls, output_dir: Union[str, Path], persist: bool = True) -> "HealingLedger":
        """Build a ledger using the standard file name inside output_dir."""
        return cls(Path(output_dir) / HEALED_LOCATORS_FILE, persist=persist)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def load(self) -> None:
        """
        Load records from disk and seed the cache.

        A missing file yields an empty ledger. An unreadable file is copied
        aside and the ledger starts empty.
        """
        self._records = []
        self._cache = {}

        if not self.path.exists():
            logger.debug(f"No healed locators file at {self.path}")
            return

        try:
            raw = self._read_raw()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load healed locators from {self.path}: {e}")
            self._backup_unreadable_file()
            return

        self._records = raw
        for record in self._records:
            self._cache[record.original] = record.healed
        logger.info(f"Loaded {len(self._records)} healed locators from {self.path}")

    def append(self, record: HealedLocator) -> None:
        """
        Record a heal, update the cache and persist if enabled.

        Write failures are logged; the heal stays in memory for this run.
        """
        self._records.append(record)
        self._cache[record.original] = record.healed

        if self.persist:
            self._flush()

    def clear(self) -> None:
        """
        Empty records and cache.

        The file is left untouched until the next heal rewrites it.
        """
        self._records = []
        self._cache = {}
        self._replace_on_flush = True
        logger.debug("Healing ledger cleared")

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def records(self) -> List[HealedLocator]:
        return list(self._records)

    def get_healed_locators(self) -> List[HealedLocator]:
        """All heals recorded (loaded + this run), oldest first."""
        return self.records

    def cached_selector(self, original: str) -> Optional[str]:
        return self._cache.get(original)

    def evict(self, original: str) -> None:
        """Drop a cache entry whose healed selector stopped resolving."""
        if self._cache.pop(original, None) is not None:
            logger.debug(f"Evicted cached heal for: {original}")

    def __len__(self) -> int:
        return len(self._records)

    # =========================================================================
    # Persistence
    # =========================================================================

    def _read_raw(self) -> List[HealedLocator]:
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, list):
            raise ValueError("healed locators file must contain a JSON array")

        records = []
        for index, item in enumerate(data):
            try:
                records.append(HealedLocator.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed healed locator #{index}: {e}")
        return records

    def _backup_unreadable_file(self) -> None:
        stamp = _utcnow().strftime("%Y%m%dT%H%M%SZ")
        backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        try:
            shutil.copy2(self.path, backup)
            logger.warning(f"Unreadable healed locators file preserved at {backup}")
        except OSError as e:
            logger.error(f"Failed to preserve unreadable healed locators file: {e}")

    def _merged_with_disk(self) -> List[HealedLocator]:
        """Records to write: ours plus any other worker wrote meanwhile."""
        if self._replace_on_flush or not self.path.exists():
            return list(self._records)

        try:
            on_disk = self._read_raw()
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable healed locators file while saving: {e}")
            return list(self._records)

        known = {record.key for record in self._records}
        merged = [record for record in on_disk if record.key not in known]
        merged.extend(self._records)
        merged.sort(key=lambda record: record.timestamp)
        return merged

    def _flush(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(str(self._lock_path), timeout=LOCK_TIMEOUT):
                records = self._merged_with_disk()
                payload = json.dumps(
                    [record.to_dict() for record in records],
                    indent=2,
                    ensure_ascii=False,
                )
                tmp_path = self.path.with_name(self.path.name + ".tmp")
                tmp_path.write_text(payload, encoding="utf-8")
                tmp_path.replace(self.path)
            self._replace_on_flush = False
            logger.info(f"💾 Saved healed locator to {self.path}")
        except (OSError, Timeout) as e:
            logger.error(f"Failed to save healed locators to {self.path}: {e}")


__all__ = [
    "HEALED_LOCATORS_FILE",
    "HealedLocator",
    "HealingLedger",
    "parse_timestamp",
]
