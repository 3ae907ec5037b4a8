"""FastAPI application for the classroom simulator."""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classroom.api import routes
from classroom.core.manager import ClassroomManager

logger = logging.getLogger(__name__)


def create_app(manager: ClassroomManager | None = None) -> FastAPI:
    manager = manager or ClassroomManager()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        for session_id in list(manager.simulators):
            manager.close_simulator(session_id)
        await manager.llm.aclose()

    app = FastAPI(title="Classroom Simulator", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    routes.configure_manager(manager)
    app.include_router(routes.router)
    return app


def main() -> None:
    import uvicorn

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if os.getenv("CLASSROOM_DEBUG") else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    host = os.getenv("CLASSROOM_HOST", "0.0.0.0")
    port = int(os.getenv("CLASSROOM_PORT", "3001"))
    logger.info("serving classroom simulator on %s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
