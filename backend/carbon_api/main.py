from fastapi import FastAPI

from carbon_api.core.config import settings
from carbon_api.core.logging import configure_logging
import carbon_api.models  # noqa: F401  # force model registration

from carbon_api.api.errors import install_exception_handlers


def create_application() -> FastAPI:
    configure_logging(settings.LOG_LEVEL, debug=settings.LOG_DEBUG)

    app = FastAPI(title="Carbon Accounts API")
    install_exception_handlers(app)

    @app.get("/")
    def root():
        return {"status": "ok", "service": "carbon-api"}

    return app


app = create_application()
