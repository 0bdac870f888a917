import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from database import check_connection
from exceptions import ConsistencyError, LedgerError, ValidationError
from routers import leases_router, notifications_router, overview_router, payments_router, units_router

# Load .env
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI):
    """Map ledger errors to HTTP responses."""

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        if isinstance(exc, ConsistencyError):
            logger.critical("Consistency error on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": str(err.get("msg")), "type": err.get("type")}
            for err in exc.errors()
        ]
        error = ValidationError("Invalid request", detail=errors)
        return JSONResponse(status_code=error.status_code, content=jsonable_encoder(error.to_dict()))


# App instance
app = FastAPI(title="Lease & Payment Ledger")

# CORS
origins = [origin for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(units_router)
app.include_router(leases_router)
app.include_router(payments_router)
app.include_router(overview_router)
app.include_router(notifications_router)


@app.get("/api/health")
def health():
    return {"status": "ok", "database": check_connection()}


if __name__ == "__main__":
    port = int(os.getenv("PORT", 10000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)
