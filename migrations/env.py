# migrations/env.py
from __future__ import annotations

import os
import sys
import logging
from logging.config import fileConfig

from alembic import context

# Project root on sys.path so "import softflow" works when alembic is invoked directly.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

config = context.config

if config.config_file_name:
    try:
        fileConfig(config.config_file_name, disable_existing_loggers=False)
    except KeyError:
        # alembic.ini without logging sections
        pass

logger = logging.getLogger("alembic.env")

# -----------------------------------------------------------------------------
# URL + metadata resolution
#
# - DATABASE_URL set and no Flask app context (CI, release step): plain Alembic.
# - Otherwise: Flask-Migrate workflow (`flask db upgrade`), engine from current_app.
# -----------------------------------------------------------------------------
DB_URL = os.getenv("DATABASE_URL")


def _flask_app():
    from flask import current_app, has_app_context  # runtime import

    return current_app if has_app_context() else None


def _set_sqlalchemy_url(url: str) -> None:
    """Set sqlalchemy.url, escaping % for ConfigParser."""
    if url:
        config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))


def _normalized(url: str) -> str:
    from softflow.settings import _normalize_db_url  # runtime import

    return _normalize_db_url(url) or url


app = _flask_app()
USING_FLASK_MIGRATE = app is not None

if USING_FLASK_MIGRATE:
    target_db = app.extensions["migrate"].db
    _set_sqlalchemy_url(target_db.engine.url.render_as_string(hide_password=False))
elif DB_URL:
    _set_sqlalchemy_url(_normalized(DB_URL))
else:
    raise RuntimeError("Run through `flask db ...` or set DATABASE_URL.")


def get_metadata():
    if USING_FLASK_MIGRATE:
        return target_db.metadata

    from softflow.extensions import db  # runtime import
    from softflow import models  # noqa: F401

    return db.metadata


def process_revision_directives(ctx, revision, directives):
    # Skip empty autogenerate revisions
    cmd_opts = getattr(config, "cmd_opts", None)
    if cmd_opts and getattr(cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []
            logger.info("No changes in schema detected.")


def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=get_metadata(),
        literal_binds=True,
        compare_type=True,
        process_revision_directives=process_revision_directives,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    if USING_FLASK_MIGRATE:
        conf_args = dict(app.extensions["migrate"].configure_args or {})
        conf_args.setdefault("process_revision_directives", process_revision_directives)
        conf_args.setdefault("compare_type", True)
        connectable = target_db.engine
    else:
        from sqlalchemy import create_engine  # runtime import

        conf_args = {
            "process_revision_directives": process_revision_directives,
            "compare_type": True,
        }
        connectable = create_engine(config.get_main_option("sqlalchemy.url"))

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=get_metadata(), **conf_args)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
