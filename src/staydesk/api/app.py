"""ASGI entry point: ``uvicorn staydesk.api.app:app``."""

from staydesk.api.factory import create_app

app = create_app()
