import copy
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from . import config

logger = logging.getLogger(__name__)


def aggregate(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Collect records into a list, keeping the order they arrived in."""
    return [record for record in records]


def make_placeholder(record: Dict[str, Any], defaults: Dict[str, Any], error: str) -> Dict[str, Any]:
    """Stand-in for a record whose detail page failed.

    Listing-level fields are kept as they were; every detail-only field gets
    its fallback value.
    """
    placeholder = dict(record)
    placeholder.update(copy.deepcopy(defaults))
    placeholder["detail_status"] = "failed"
    placeholder["detail_error"] = error
    return placeholder


def timestamped_filename(prefix: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{prefix}-{now.strftime('%Y-%m-%dT%H-%M-%S-%fZ')}.json"


def persist_results(collection: List[Dict[str, Any]], prefix: str, directory: Optional[str] = None) -> str:
    """Write the whole collection to one new JSON file and return its path."""
    directory = directory or config.RESULTS_DIR
    os.makedirs(directory, exist_ok=True)
    filepath = os.path.join(directory, timestamped_filename(prefix))
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(collection, f, indent=2, ensure_ascii=False)
    logger.info(f"Results saved to {filepath}")
    return filepath
