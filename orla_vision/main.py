from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from orla_vision.control_routes import control_router
from orla_vision.face_engine.session import VisionSession
from orla_vision.logger import configure_logging


def create_app(session=None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # release the camera on shutdown
        app.state.session.disable()

    app = FastAPI(title="Orla Vision - Backend", lifespan=lifespan)
    app.state.session = session or VisionSession()
    app.include_router(control_router)
    return app


app = create_app()


if __name__ == "__main__":
    # Run with: python -m orla_vision.main
    configure_logging()
    uvicorn.run("orla_vision.main:app", host="0.0.0.0", port=8000)
