"""ASGI entrypoint for the focus timer API."""

from focus_timer.api.app import create_app
from focus_timer.containers import build_container

app = create_app(build_container())
