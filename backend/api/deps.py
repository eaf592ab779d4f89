"""Shared request dependencies for the API routers."""
from typing import Optional
from fastapi import Header, HTTPException

from core.repository import get_repository  # noqa: F401


def get_readable_table_ids(x_readable_tables: Optional[str] = Header(None)) -> Optional[frozenset[int]]:
    """
    Table ids the caller may read, as resolved by the upstream auth layer.
    Header absent → unrestricted.
    """
    if x_readable_tables is None:
        return None
    try:
        return frozenset(int(t) for t in x_readable_tables.split(",") if t.strip())
    except ValueError:
        raise HTTPException(400, detail="X-Readable-Tables must be a comma-separated list of table ids")


def check_table_readable(table_id: int, readable: Optional[frozenset[int]]) -> None:
    if readable is not None and table_id not in readable:
        raise HTTPException(403, detail="You don't have permissions to do that.")
