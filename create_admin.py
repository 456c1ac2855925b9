"""
Seed the admin account.

    ADMIN_USERNAME=admin ADMIN_PASSWORD=... python create_admin.py

Safe to run repeatedly: an existing account is promoted/unblocked, never
recreated, and its password is left alone.
"""
import os
import sys

from softflow import create_app
from softflow.services.accounts import ensure_admin

USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
EMAIL = os.environ.get("ADMIN_EMAIL", "admin@softflow.tech")
PASSWORD = os.environ.get("ADMIN_PASSWORD")

if not PASSWORD:
    sys.exit("ADMIN_PASSWORD is not set.")

app = create_app()

with app.app_context():
    user, created = ensure_admin(USERNAME, PASSWORD, email=EMAIL)
    if created:
        print("Admin created:", user.username)
    else:
        print("Admin already exists:", user.username)
