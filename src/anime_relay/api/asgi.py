"""ASGI entrypoint for the anime relay webhook API."""

from anime_relay.api.app import create_app
from anime_relay.containers import build_container

app = create_app(build_container())
