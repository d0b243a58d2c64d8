"""
Alias API routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from models import parse_id
from web.dependencies import get_config, get_db_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

DEFAULT_MAX_API_RECORDS = 100


def resolve_page(first_index: int, last_index: Optional[int], max_records: int):
    """Clamp a requested index range to at most ``max_records`` entries.

    A negative first index means 0; a missing or negative last index, or
    one too far past the first, is pulled in to the largest allowed page.
    """
    first_index = max(first_index, 0)
    if last_index is None or last_index < 0 or last_index - first_index >= max_records:
        last_index = first_index + max_records - 1
    return first_index, last_index


@router.get("/aliases")
async def get_aliases(
    account: Optional[str] = Query(None),
    timestamp: int = Query(0),
    first_index: int = Query(0, alias="firstIndex"),
    last_index: Optional[int] = Query(None, alias="lastIndex"),
    db_service=Depends(get_db_service),
    config=Depends(get_config),
):
    """
    List the aliases owned by an account.

    Aliases are ordered by name; only those with a timestamp at or after
    ``timestamp`` are counted for the firstIndex..lastIndex page.
    """
    if not account:
        raise HTTPException(status_code=400, detail="Missing account")
    try:
        account_id = parse_id(account)
    except ValueError:
        raise HTTPException(status_code=400, detail="Incorrect account")
    if timestamp < 0:
        raise HTTPException(status_code=400, detail="Incorrect timestamp")

    max_records = config.api.max_api_records if config else DEFAULT_MAX_API_RECORDS
    first_index, last_index = resolve_page(first_index, last_index, max_records)

    try:
        aliases = db_service.get_aliases(account_id, timestamp, first_index, last_index)
    except Exception as e:
        logger.error(f"Error listing aliases for {account}: {e}")
        raise HTTPException(status_code=500, detail="Unable to read aliases")

    return {"aliases": aliases}
