import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leasekeeper import __version__
from leasekeeper.dependencies import STATUTORY_GRAPH
from leasekeeper.settings import API_DEBUG, settings

logging.basicConfig(
    level=logging.DEBUG if API_DEBUG else settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Leasekeeper API",
    version=__version__,
    description="HTTP layer over the RTM timeline, evidence and legal template services.",
)

# --- CORS ----------------------------------------------------------
# Dev-only origins for the dashboard; tighten for production.
origins = [
    "http://localhost:5173",    # Vite dev server default port
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

# --- Include Routers ----------------------------------------------------------
from .eligibility import router as eligibility_router  # noqa: E402
from .evidence import router as evidence_router  # noqa: E402
from .templates import router as templates_router  # noqa: E402
from .timeline import router as timeline_router  # noqa: E402

app.include_router(timeline_router)
app.include_router(evidence_router)
app.include_router(templates_router)
app.include_router(eligibility_router)


# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "Leasekeeper API is alive"}


# ---------- GET /dependencies ----------
@app.get("/dependencies")
def milestone_dependencies():
    """Milestone dependency graph (nodes and links) for the dashboard widget."""
    return STATUTORY_GRAPH.to_json()
