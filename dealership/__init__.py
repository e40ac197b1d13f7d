import logging

from flask import Flask, send_from_directory

from .config import Config
from .controllers.admin import bp as admin_bp
from .controllers.auth import bp as auth_bp
from .controllers.errors import bp as errors_bp
from .controllers.favorites import bp as favorites_bp
from .controllers.forms import bp as forms_bp
from .controllers.services import bp as services_bp
from .controllers.vehicles import bp as vehicles_bp
from .models.rest import RestDataService
from .models.store import Store
from .services.common import set_data_service


def build_data_service(config):
    """Pick the data-service backend named by DATA_BACKEND."""
    if config["DATA_BACKEND"] == "rest":
        return RestDataService(config["BAAS_URL"], config["BAAS_KEY"], timeout=config["BAAS_TIMEOUT"])
    return Store(config["DATA_PATH"], upload_dir=config["UPLOAD_DIR"],
                 url_prefix=config["UPLOAD_URL_PREFIX"])


def create_app(overrides: dict | None = None, data_service=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    set_data_service(data_service or build_data_service(app.config))

    app.register_blueprint(errors_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(vehicles_bp)
    app.register_blueprint(favorites_bp)
    app.register_blueprint(services_bp)
    app.register_blueprint(forms_bp)
    app.register_blueprint(admin_bp)

    @app.get(f"{app.config['UPLOAD_URL_PREFIX']}/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(app.config["UPLOAD_DIR"], filename)

    return app
