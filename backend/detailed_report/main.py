from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.report import router as report_router
from .config import settings
from .logger import configure_logging

configure_logging()

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(report_router)


@app.get("/")
async def root():
    return {"status": "ok"}
