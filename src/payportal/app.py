import logging

from flask import Flask

from payportal.config import Config
from payportal.api.routes import api


def create_app(config_overrides=None, http_session=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    if http_session is not None:
        app.extensions["payportal.http_session"] = http_session

    logging.basicConfig(level=logging.DEBUG if app.config["DEBUG"] else logging.INFO)
    app.register_blueprint(api, url_prefix="/core")

    return app
