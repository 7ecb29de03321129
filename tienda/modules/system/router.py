from fastapi import APIRouter

from tienda.dependencies.dataDependencies import data_store_dependency

system_router = APIRouter(prefix="/system", tags=["System"])


@system_router.get("/persistence")
async def get_persistence_status(data: data_store_dependency):
    """Escrituras pendientes y últimos fallos de persistencia"""
    queue = data.persistence
    return {
        "pending": queue.pending,
        "pending_keys": queue.pending_keys(),
        "auto_flush": data.auto_flush,
        "recent_failures": [r.as_dict() for r in queue.failures],
        "ledger_entries": len(data.ledger)
    }


@system_router.post("/persistence/flush")
def flush_persistence(data: data_store_dependency):
    """Forzar la escritura de todo lo pendiente"""
    results = data.flush()
    return {
        "written": sum(1 for r in results if r.ok),
        "failed": sum(1 for r in results if not r.ok),
        "results": [r.as_dict() for r in results]
    }
