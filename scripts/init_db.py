from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from campus_card.common.log import configure_logging
from campus_card.config import get_settings_module
from campus_card.database.bootstrap import apply_schema, ensure_admin_user, list_tables
from campus_card.main import SCHEMA_PATH

logger = logging.getLogger("campus_card.scripts.init_db")


def main() -> None:
    load_dotenv(override=False)
    configure_logging()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=SCHEMA_PATH)
    ensure_admin_user(
        db_config,
        email=getattr(settings, "ADMIN_EMAIL", ""),
        password=getattr(settings, "ADMIN_PASSWORD", ""),
    )
    tables = list_tables(db_config)
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )


if __name__ == "__main__":
    main()
