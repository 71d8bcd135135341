"""
OrderDesk — Seed data

[CONFIG DATA] only: default menu and option table, inserted when empty.
"""
import logging
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.config import get_settings
from orderdesk.models.menu import MenuItem, MenuOption

settings = get_settings()
logger = logging.getLogger(__name__)

DEFAULT_MENU = [
    {"name": "Americano", "price": 2500, "image": "americano.jpg", "stock": 10},
    {"name": "Iced Americano", "price": 3000, "image": "iced-americano.jpg", "stock": 10},
    {"name": "Cafe Latte", "price": 3500, "image": "latte.jpg", "stock": 10},
]

OPTION_LABELS = {"shot": "Extra shot", "syrup": "Add syrup"}


async def seed_defaults(db: AsyncSession) -> None:
    menu_count = (await db.execute(select(func.count()).select_from(MenuItem))).scalar_one()
    if menu_count == 0:
        db.add_all(MenuItem(**row) for row in DEFAULT_MENU)
        logger.info("Seeded %d menu items", len(DEFAULT_MENU))

    option_count = (await db.execute(select(func.count()).select_from(MenuOption))).scalar_one()
    if option_count == 0:
        db.add_all(
            MenuOption(key=key, label=OPTION_LABELS.get(key, key.title()), surcharge=surcharge)
            for key, surcharge in settings.DEFAULT_OPTION_SURCHARGES.items()
        )
        logger.info("Seeded option table: %s", settings.DEFAULT_OPTION_SURCHARGES)

    await db.commit()
