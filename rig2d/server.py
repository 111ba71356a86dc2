"""Aggregate app for the kinematics HTTP surface."""
from __future__ import annotations

from fastapi import FastAPI

from rig2d.kinematics.routes import router as kinematics_router


def create_app() -> FastAPI:
    app = FastAPI(title="rig2d")
    app.include_router(kinematics_router)
    return app


app = create_app()
