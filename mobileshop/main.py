from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mobileshop.database import engine, Base, SessionLocal
from mobileshop.users.routers import router as user_router
from mobileshop.stock.products.router import router as product_router
from mobileshop.stock.inventory.router import router as inventory_router

from mobileshop.stock.category.router import router as category_router

from mobileshop.sales.router import router as sales_router
from mobileshop.returns.router import router as returns_router
from mobileshop.accounts.expenses.router import router as expenses_router
from mobileshop.accounts.dashboard.router import router as dashboard_router

from mobileshop.backup.router import router as backup_router

from mobileshop.config import settings
from mobileshop.seed import seed_defaults

import os
from contextlib import asynccontextmanager
from loguru import logger


logger.add(settings.LOG_FILE, rotation=settings.LOG_ROTATION, level=settings.LOG_LEVEL)

# Ensure working folders exist
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
os.makedirs(settings.BACKUP_DIR, exist_ok=True)


# Database startup
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_defaults(db)
    finally:
        db.close()

    yield
    logger.info("Application shutdown")

# Create app
app = FastAPI(
    title="MOBILE SHOP APP",
    description="An API for running a mobile phone shop: stock, sales, returns, expenses and reports.",
    version="1.0.0",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # For production, change to specific domains
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Routers
app.include_router(user_router, prefix="/users", tags=["Users"])
app.include_router(category_router, prefix="/stock/category", tags=["Stock - Category"])
app.include_router(product_router, prefix="/stock/products", tags=["Stock - Products"])
app.include_router(inventory_router, prefix="/stock/inventory", tags=["Stock - Inventory"])

app.include_router(sales_router, prefix="/sales", tags=["Sales"])
app.include_router(returns_router, prefix="/returns", tags=["Returns"])
app.include_router(expenses_router, prefix="/accounts/expenses", tags=["Accounts - Expenses"])
app.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])

app.include_router(backup_router, tags=["Backup"])


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("mobileshop.main:app", host=os.getenv("SERVER_IP", "127.0.0.1"), port=8000)
