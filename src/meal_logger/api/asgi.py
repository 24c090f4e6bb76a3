"""ASGI entrypoint for the meal logger API."""

from meal_logger.api.app import create_app
from meal_logger.containers import build_container

app = create_app(build_container())
