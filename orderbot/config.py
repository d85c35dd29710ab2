import os

from dotenv import load_dotenv

load_dotenv()


def _csv(name: str, default: str) -> tuple:
    raw = os.getenv(name) or default
    return tuple(p.strip() for p in raw.split(",") if p.strip())


TAX_RATE: float = float(os.getenv("TAX_RATE", "0.05"))

DEFAULT_SESSION_ID = os.getenv("DEFAULT_SESSION_ID", "anon") or "anon"

WELCOME_MESSAGE = os.getenv("WELCOME_MESSAGE", "Hello! How can I help?")
STORE_HOURS     = os.getenv("STORE_HOURS", "We are open Mon-Sat, 9 AM to 7 PM.")

CURRENCY_LOCALE = os.getenv("CURRENCY_LOCALE", "en_US.UTF-8")
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "$")

# first present wins, left to right
ITEM_PARAM_NAMES     = _csv("ITEM_PARAM_NAMES", "item,menu_item,product,food")
QUANTITY_PARAM_NAMES = _csv("QUANTITY_PARAM_NAMES", "quantity,qty,number,amount")

CATALOG_PATH = os.getenv("CATALOG_PATH")

CART_STORE = os.getenv("CART_STORE", "memory").strip().lower()
MONGODB_URI = os.getenv(
    "MONGODB_URI"
)
DB_NAME      = os.getenv("DB_NAME", "dialogflow_orders")
CART_COLL    = os.getenv("CART_COLLECTION", "carts")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "3000"))
