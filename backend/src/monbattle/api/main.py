from contextlib import asynccontextmanager
from fastapi import FastAPI

from monbattle.bootstrap import build_services
from monbattle.config import Settings
from monbattle.logging_config import configure_logging
from monbattle.api.routers.commands import router as commands_router
from monbattle.api.routers.players import router as players_router
from monbattle.api.routers.battles import router as battles_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    # тесты могут положить готовые сервисы заранее
    if getattr(app.state, "services", None) is None:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        app.state.services = build_services(settings)
    yield


app = FastAPI(title="Creature Battle Server", lifespan=lifespan)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(commands_router)
app.include_router(players_router)
app.include_router(battles_router)
