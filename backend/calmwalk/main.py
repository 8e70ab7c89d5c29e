import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from calmwalk.api.sessions import router as sessions_router
from calmwalk.api.zones import router as zones_router
from calmwalk.api.routes import router as routes_router
from calmwalk.api.export import router as export_router
from calmwalk.db import Base, engine
from calmwalk.models.walk_session import WalkSessionRecord  # noqa: F401  (import ensures table is registered)
from calmwalk.models.zone import CalmZoneRecord, StressZoneRecord  # noqa: F401

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI()

# Allow CORS for local frontend
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create DB tables (sessions, zones) on startup
Base.metadata.create_all(bind=engine)

app.include_router(sessions_router)
app.include_router(zones_router)
app.include_router(routes_router)
app.include_router(export_router)


@app.get("/")
def root():
    return {"message": "Calmwalk backend is running"}
