import logging
from fastapi import FastAPI, Request
from slack_bolt.async_app import AsyncApp
from slack_bolt.adapter.fastapi.async_handler import AsyncSlackRequestHandler

from app.config import get_settings
from app.api.routes import teams, channels
from app.integrations.slack.handlers import register_handlers
from app.services.container import build_services

settings = get_settings()

# Configure application logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Set log level for app modules
logger = logging.getLogger("app")
logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

services = build_services(settings)

# Slack Bolt app: acks within 3 seconds, listeners keep running afterwards
slack_app = AsyncApp(
    token=settings.slack_bot_token,
    signing_secret=settings.slack_signing_secret,
)
register_handlers(slack_app, services.handlers)
slack_handler = AsyncSlackRequestHandler(slack_app)

app = FastAPI(
    title=settings.app_name,
    description="Routes Slack mentions to team knowledge contexts and curates team knowledge documents",
    version="0.1.0",
)
app.state.services = services

# Include routers
app.include_router(teams.router, prefix="/api/teams", tags=["Teams"])
app.include_router(channels.router, prefix="/api/channels", tags=["Channels"])


@app.post("/slack/events")
async def slack_events(request: Request):
    return await slack_handler.handle(request)


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": "0.1.0",
        "endpoints": {
            "slack": "/slack/events",
            "teams": "/api/teams",
            "channels": "/api/channels",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.app_name}
