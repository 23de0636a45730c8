from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from inventory_tracker.core.security import actor_id_from_auth, authenticate_request
from inventory_tracker.database.session import SessionLocal, get_db
from inventory_tracker.services.stock_engine import StockMutationEngine


def require_auth(
    api_key: Optional[str] = Header(None, alias="X-API-Key"),
    api_key_alt: Optional[str] = Header(None, alias="api-key"),
    authorization: Optional[str] = Header(None),
):
    api_key_value = api_key or api_key_alt
    return authenticate_request(
        api_key=api_key_value,
        authorization=authorization,
        require_auth=True,
    )


def get_actor_id(
    auth=Depends(require_auth),
    actor_header: Optional[int] = Header(None, alias="X-Actor-Id"),
) -> Optional[int]:
    actor_id = actor_id_from_auth(auth)
    if actor_id is not None:
        return actor_id
    return actor_header


@lru_cache
def get_stock_engine() -> StockMutationEngine:
    return StockMutationEngine(SessionLocal)


__all__ = ["get_actor_id", "get_db", "get_stock_engine", "require_auth"]
