# app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.db import init_db
from app.errors import AccountingError
from app.observability import RequestLogMiddleware, configure_logging
from app.routers.fixed_expenses import router as fixed_expenses_router
from app.routers.installments import router as installments_router
from app.routers.savings import router as savings_router
from app.routers.system import router as system_router
from app.routers.transactions import router as transactions_router

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # one-time schema/data upgrade, then the app only knows the current model
    init_db()
    yield


app = FastAPI(title="FinanceFlow", version="0.1.0", lifespan=lifespan)

# Middleware order: CORS first (the SPA runs on another port), then logging
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AccountingError)
async def accounting_error_handler(request: Request, exc: AccountingError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Routers
app.include_router(system_router)
app.include_router(transactions_router)
app.include_router(installments_router)
app.include_router(fixed_expenses_router)
app.include_router(savings_router)
