from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import middleware
from tienda.common.middleware import StoreContextMiddleware, SecurityHeadersMiddleware
from tienda.common.exceptions import PosError, pos_error_handler
from tienda.core.data import create_data_store

# Import routers
from tienda.modules.registers.router import cash_registers_router
from tienda.modules.ledger.router import cash_movements_router
from tienda.modules.sales.router import sales_router
from tienda.modules.expenses.router import expenses_router
from tienda.modules.layaways.router import layaways_router
from tienda.modules.products.router import product_router
from tienda.modules.reports.router import reports_router
from tienda.modules.system.router import system_router

from tienda.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="POS multi-tienda: ventas, gastos, separados, cajas registradoras y libro de caja",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(StoreContextMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(PosError, pos_error_handler)

# Include routers
app.include_router(cash_registers_router, prefix="/api/v1")
app.include_router(cash_movements_router, prefix="/api/v1")
app.include_router(sales_router, prefix="/api/v1")
app.include_router(expenses_router, prefix="/api/v1")
app.include_router(layaways_router, prefix="/api/v1")
app.include_router(product_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.get("/")
async def read_root():
    return {
        "message": f"{settings.APP_NAME} is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.APP_NAME} starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    app.state.data_store = create_data_store()


@app.on_event("shutdown")
async def shutdown_event():
    data = getattr(app.state, "data_store", None)
    if data is not None:
        results = data.flush()
        failed = [r for r in results if not r.ok]
        if failed:
            logger.error(f"{len(failed)} pending writes failed on shutdown")
    logger.info(f"{settings.APP_NAME} shutting down...")
