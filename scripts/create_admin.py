#!/usr/bin/env python3
"""
Crea (o promueve) el primer super_admin.

    ADMIN_EMAIL=ops@acme.com ADMIN_PASSWORD=... python scripts/create_admin.py
"""
import logging
import os
import sys

from survey_api.core.logging import configure_logging
from survey_api.core.security import hash_password
from survey_api.db.session import SessionLocal
from survey_api.services.store import SurveyStore
from survey_api.services.users import create_user, normalize_email

logger = logging.getLogger("create_admin")


def main() -> int:
    configure_logging()
    email = normalize_email(os.getenv("ADMIN_EMAIL", ""))
    password = os.getenv("ADMIN_PASSWORD", "")
    if not email or len(password) < 8:
        logger.error("Define ADMIN_EMAIL y ADMIN_PASSWORD (mínimo 8 caracteres)")
        return 1

    with SessionLocal() as db:
        store = SurveyStore(db)
        with store.transaction():
            user = store.get_user_by_email(email)
            if user:
                user.role = "super_admin"
                user.password_hash = hash_password(password)
                user.is_active = True
                logger.info("Usuario existente promovido a super_admin: %s", email)
            else:
                create_user(store, {
                    "email": email,
                    "password": password,
                    "name": os.getenv("ADMIN_NAME"),
                    "role": "super_admin",
                })
                logger.info("super_admin creado: %s", email)
    return 0


if __name__ == "__main__":
    sys.exit(main())
