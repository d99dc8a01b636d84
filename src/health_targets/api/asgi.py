"""ASGI entrypoint for the health targets API."""

from health_targets.api.app import create_app
from health_targets.containers import build_container

app = create_app(build_container())
