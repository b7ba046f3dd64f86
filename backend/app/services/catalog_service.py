"""Sales-history lookup backed by the product CSV."""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Dict, List, Optional

from .io_utils import frame_to_records, load_table

LOGGER = logging.getLogger(__name__)

HISTORY_OFFSET_YEARS = 2


def default_history_date(today: Optional[date] = None) -> str:
    """Return today's date shifted back two years, as ``YYYY-MM-DD``."""

    today = today or date.today()
    try:
        shifted = today.replace(year=today.year - HISTORY_OFFSET_YEARS)
    except ValueError:
        # 29 February
        shifted = today.replace(year=today.year - HISTORY_OFFSET_YEARS, day=28)
    return shifted.isoformat()


class SalesCatalog:
    """Fetch the sales CSV once per process and serve filtered rows."""

    def __init__(self, source: str) -> None:
        self.source = source
        self._rows: Optional[List[Dict[str, str]]] = None
        self._lock = threading.Lock()

    def records(self) -> List[Dict[str, str]]:
        with self._lock:
            if self._rows is None:
                LOGGER.info("Loading sales data from %s", self.source)
                self._rows = frame_to_records(load_table(self.source))
            return self._rows

    def by_id_and_date(self, product_id: str, on_date: Optional[str] = None) -> List[Dict[str, str]]:
        target = on_date or default_history_date()
        return [
            row
            for row in self.records()
            if row.get("product_id") == product_id and row.get("date") == target
        ]

    def clear(self) -> None:
        with self._lock:
            self._rows = None
