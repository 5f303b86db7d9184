"""ASGI entrypoint for the CalTrax API."""

from caltrax.api.app import create_app
from caltrax.containers import build_container

app = create_app(build_container())
