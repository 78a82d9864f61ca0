"""ASGI entrypoint for the carbon tracker API."""

from carbon_tracker.api.app import create_app
from carbon_tracker.containers import build_container

app = create_app(build_container())
