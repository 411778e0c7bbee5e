from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from pathlib import Path
from config import settings, create_db_and_tables, init_config_loader
from middleware.logging_middleware import CorrelationIdMiddleware, RequestTimingMiddleware
from routes.api import router as api_router
from services.errors import EngineError
from utils.logger import setup_logger

logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application lifespan")

    init_config_loader(Path(settings.CONFIG_PATH) if settings.CONFIG_PATH else None)

    create_db_and_tables()
    logger.info("Database tables synchronized")

    yield

    logger.info("Application shutdown complete")


app = FastAPI(title="Interaction Engine API", version="0.1.0", debug=settings.DEBUG, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "Request rejected",
        extra={
            "path": request.url.path,
            "error": exc.code,
            "detail": exc.message,
            "status_code": exc.status_code
        }
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "error": exc.code})


app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def root():
    return {"app": "interaction-engine", "status": "running"}
