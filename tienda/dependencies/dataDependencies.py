from fastapi import BackgroundTasks, Depends, Request
from typing import Annotated

from tienda.core.data import PosDataStore


def get_data_store(request: Request) -> PosDataStore:
    """PosDataStore created on startup and kept on app.state"""
    return request.app.state.data_store


def schedule_flush(data: PosDataStore, background_tasks: BackgroundTasks) -> None:
    """Write queued changes after the response is sent (no-op with AUTO_FLUSH)"""
    if not data.auto_flush and data.persistence.pending:
        background_tasks.add_task(data.flush)


data_store_dependency = Annotated[PosDataStore, Depends(get_data_store)]
