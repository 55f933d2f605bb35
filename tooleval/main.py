# tooleval/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
from .db import Base, engine, session_scope
from . import models  # noqa: F401  (registers tables on Base)
from .errors import install_error_handlers
from .routes import projects, public
from .settings import get_settings
from .snapshots import seed_demo_tools

settings = get_settings()


def _ensure_db_ready() -> None:
    # tables must exist before the first request, also under pytest
    Base.metadata.create_all(bind=engine)


# Run schema init at import time so pytest cannot bypass it
_ensure_db_ready()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _ensure_db_ready()

    if settings.SEED_DEMO_TOOL:
        with session_scope() as db:
            seed_demo_tools(db)

    yield


app = FastAPI(title="Tool Evaluation API", version=settings.APP_VERSION, lifespan=lifespan)
install_error_handlers(app)

app.include_router(projects.router)
app.include_router(public.router)


@app.get("/")
def health():
    return {"status": "ok", "service": "tooleval", "version": settings.APP_VERSION, "env": settings.ENV}
