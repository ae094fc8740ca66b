from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import asyncio

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from phindex import models  # noqa: F401  registers tables on Base.metadata
from phindex.config import CORS_ORIGINS, DB_SCHEMA
from phindex.database import Base, engine
from phindex.log_config import setup_logging
from phindex.routes import account_routes, comment_routes, game_routes, profile_routes, vote_routes

# 🔒 Rate limiting setup

from phindex.limiter import limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

setup_logging()

app = FastAPI(title="Phindex API")

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please slow down."}
    )

# ✅ Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(profile_routes.router)
app.include_router(vote_routes.router)
app.include_router(comment_routes.router)
app.include_router(game_routes.router)
app.include_router(account_routes.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


# ✅ Run DB init on startup
@app.on_event("startup")
async def on_startup():
    # one retry, then carry on with the tables already there
    for attempt in range(2):
        try:
            async with engine.begin() as conn:
                if DB_SCHEMA and conn.dialect.name == "postgresql":
                    await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{DB_SCHEMA}";'))
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database ready")
            break  # success
        except (SQLAlchemyError, OSError) as e:
            if attempt == 0:
                logger.warning("DB init failed, retrying once: {!r}", e)
                await asyncio.sleep(0.5)
            else:
                logger.error("Skipping DB init due to error: {!r}", e)
