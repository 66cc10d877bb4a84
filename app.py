import logging

import click
from flask import Flask

from configs import Config, db, login


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class())
    app.logger.setLevel(
        getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    )

    db.init_app(app)
    login.init_app(app)

    # models must be imported before create_all / user_loader use them
    from db import models  # noqa: F401
    from dao import user as user_dao

    @login.user_loader
    def load_user(user_id):
        return user_dao.get_user(user_id)

    _register_cli(app)
    return app


def _register_cli(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables (development; use alembic elsewhere)."""
        db.create_all()
        click.echo("Tables created.")

    @app.cli.command("seed")
    def seed_command():
        """Load permission templates, catalog samples and users."""
        from seed import seed_all

        seed_all()
        click.echo("Seed data loaded.")


app = create_app()

if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=5000)
