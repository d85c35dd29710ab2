import logging

from fastapi import FastAPI

from orderbot import config  # reads .env on import
from orderbot.router import webhook

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

app = FastAPI(title="Dialogflow Ordering Webhook", version="1.0")

app.include_router(webhook.router, tags=["webhook"])
