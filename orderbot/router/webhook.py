import json
import logging
import threading
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from orderbot import config
from orderbot.schemas.models import WebhookRequest, WebhookResponse
from orderbot.services.cart_store import build_cart_store
from orderbot.services.catalog import load_catalog
from orderbot.services.dispatcher import Dispatcher
from orderbot.services.formatter import APOLOGY, CurrencyFormatter, text_response

log = logging.getLogger(__name__)

router = APIRouter()

_dispatcher: Optional[Dispatcher] = None
_dispatcher_lock = threading.Lock()


def build_dispatcher() -> Dispatcher:
    return Dispatcher(
        store=build_cart_store(config.CART_STORE),
        catalog=load_catalog(config.CATALOG_PATH),
        currency=CurrencyFormatter(config.CURRENCY_LOCALE, config.CURRENCY_SYMBOL),
        tax_rate=config.TAX_RATE,
        item_fields=config.ITEM_PARAM_NAMES,
        quantity_fields=config.QUANTITY_PARAM_NAMES,
        welcome_message=config.WELCOME_MESSAGE,
        store_hours=config.STORE_HOURS,
        default_session=config.DEFAULT_SESSION_ID,
    )


def get_dispatcher() -> Dispatcher:
    """
    Process-wide dispatcher, built once. Concurrent first calls wait on the
    lock, so every request shares one cart store. A failed build is not
    remembered and is retried on the next call.
    """
    global _dispatcher
    if _dispatcher is not None:
        return _dispatcher
    with _dispatcher_lock:
        if _dispatcher is None:
            _dispatcher = build_dispatcher()
        return _dispatcher


def set_dispatcher(dispatcher: Optional[Dispatcher]) -> None:
    """Install a ready dispatcher (or None to rebuild from config on next use)."""
    global _dispatcher
    with _dispatcher_lock:
        _dispatcher = dispatcher


@router.get("/", response_class=PlainTextResponse)
def root():
    return "Dialogflow webhook is running"


@router.get("/health")
def health():
    try:
        dispatcher = get_dispatcher()
    except Exception as e:
        log.exception("dispatcher unavailable")
        return {"ok": False, "error": type(e).__name__}
    return {"ok": True, "cart_store": getattr(dispatcher.store, "name", "memory")}


@router.post("/webhook", response_model=WebhookResponse)
async def webhook(request: Request):
    """
    Dialogflow ES fulfillment. Always answers 200 with a text reply; domain
    problems become friendly messages, internal failures a generic apology.
    """
    try:
        raw = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        log.warning("webhook body is not valid JSON: %s", e)
        return text_response(APOLOGY)

    if not isinstance(raw, dict):
        log.warning("webhook body is not a JSON object: %s", type(raw).__name__)
        return text_response(APOLOGY)

    try:
        body = WebhookRequest.model_validate(raw)
    except ValidationError as e:
        log.warning("webhook body failed validation: %s", e)
        return text_response(APOLOGY)

    try:
        dispatcher = await run_in_threadpool(get_dispatcher)
    except Exception:
        log.exception("could not build the webhook dispatcher")
        return text_response(APOLOGY)

    try:
        return await run_in_threadpool(dispatcher.handle, body)
    except Exception:
        log.exception("webhook dispatch failed for intent %r", body.queryResult.intent.displayName)
        return text_response(APOLOGY)
