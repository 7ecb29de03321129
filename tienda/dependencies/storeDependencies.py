from typing import Annotated, Optional
from fastapi import Depends, HTTPException, Query, Request, status


def get_store_id(
    request: Request,
    store_id: Optional[str] = Query(None, description="ID de la tienda (o header X-Store-ID)")
) -> str:
    """Store id from the query string, falling back to the X-Store-ID header"""
    if store_id:
        return store_id
    if getattr(request.state, "store_id", None):
        return request.state.store_id
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Store context not found. Provide store_id or the X-Store-ID header."
    )


def get_optional_store_id(
    request: Request,
    store_id: Optional[str] = Query(None, description="Filtrar por tienda (o header X-Store-ID)")
) -> Optional[str]:
    return store_id or getattr(request.state, "store_id", None)


StoreId = Annotated[str, Depends(get_store_id)]
OptionalStoreId = Annotated[Optional[str], Depends(get_optional_store_id)]
