from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import validation_exception_handler
from app.core.logging_config import configure_logging
from app.db.mongo import connect_to_mongo, close_mongo_connection
from app.routes.members import router as members_router
from app.routes.products import router as products_router
from app.routes.transactions import router as transactions_router
from app.routes.debts import router as debts_router, payments_router as debt_payments_router
from app.routes.reports import router as reports_router

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    yield
    await close_mongo_connection()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION,
    debug=settings.DEBUG,
    lifespan=lifespan
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(members_router)
app.include_router(products_router)
app.include_router(transactions_router)
app.include_router(debts_router)
app.include_router(debt_payments_router)
app.include_router(reports_router)


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}
