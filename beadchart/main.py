from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.palettes import router as palettes_router
from .api.patterns import router as patterns_router

app = FastAPI(title="Bead Pattern Export Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(patterns_router, prefix="/api/v1", tags=["patterns"])
app.include_router(palettes_router, prefix="/api/v1", tags=["palettes"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
