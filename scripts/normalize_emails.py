#!/usr/bin/env python3
"""Lower-case and trim every email in the Role Directory.

Usage:
    python scripts/normalize_emails.py
"""

import logging

from teamhub.services.database import db
from teamhub.services.directory import normalize_role_emails

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")
    db.initialize()
    try:
        changed = normalize_role_emails()
        print(f"Email normalization complete: {changed} updated")
    finally:
        db.close()
