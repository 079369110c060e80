import typing as t

from flask import Flask

from .routes import bp as routes_bp


def create_app(config: t.Optional[t.Mapping[str, t.Any]] = None) -> Flask:
    """Application factory for the PDF weaver web interface."""

    app = Flask(__name__)
    app.config.from_mapping(
        PDFWEAVER_PAGE_SIZE="LETTER",
        PDFWEAVER_IMAGE_MARGIN=80.0,
        PDFWEAVER_SKIP_UNREADABLE=False,
    )
    if config:
        app.config.from_mapping(config)

    app.register_blueprint(routes_bp)

    return app
