"""
Batch list loading: which customers or projects go into a report.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def read_list_file(list_file: Path | None) -> list[str]:
    """Read one entity name per line, skipping blank lines. Missing file -> []."""
    if list_file is None:
        return []
    if not list_file.exists():
        logger.info(f"List file {list_file} not found, skipping")
        return []

    with open(list_file, encoding="utf-8-sig") as f:
        return [line.strip() for line in f if line.strip()]


def load_entity_batch(list_file: Path | None, single_name: str | None = None) -> list[str]:
    """
    Build the ordered batch of entity names.

    File order is preserved and the single name is appended last. Repeated
    names keep their first position only, so each name yields one sheet.
    """
    names = read_list_file(list_file)
    if single_name:
        names.append(single_name.strip())

    batch = list(dict.fromkeys(name for name in names if name))
    if len(batch) < len(names):
        logger.info(f"Dropped {len(names) - len(batch)} duplicate name(s) from batch")
    return batch
