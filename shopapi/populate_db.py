"""Seed a development database with an admin account and a few products.

    python -m shopapi.populate_db
"""
import logging
import os
from decimal import Decimal

from shopapi.config import settings
from shopapi.database import SessionLocal, init_db
from shopapi.models.product import Product
from shopapi.models.users import UserRole
from shopapi.services import accounts
from shopapi.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)

# Configuration
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin12345")

PRODUCTS = [
    ("Mechanical keyboard", "Tenkeyless, brown switches", Decimal("89.90"), 25),
    ("Wireless mouse", "2.4 GHz, USB receiver", Decimal("24.50"), 60),
    ("27\" monitor", "1440p IPS panel", Decimal("279.00"), 8),
    ("USB-C hub", "7 ports, 100 W passthrough", Decimal("39.99"), 40),
]
# End Configuration


def seed():
    init_db()
    session = SessionLocal()
    try:
        # Ensure admin user exists
        if accounts.get_user_by_email(session, ADMIN_EMAIL) is None:
            accounts.register(session, ADMIN_EMAIL, ADMIN_PASSWORD, role=UserRole.ADMIN)
            logger.info("created admin account %s", ADMIN_EMAIL)

        existing = {name for (name,) in session.query(Product.name).all()}
        for name, description, price, stock in PRODUCTS:
            if name in existing:
                continue
            session.add(Product(name=name, description=description, price=price, stock_quantity=stock))
        session.commit()
        logger.info("catalog seeded: %d products", session.query(Product).count())
    finally:
        session.close()


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    seed()
