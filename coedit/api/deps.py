from fastapi import Request

from coedit.core.events import EventBus


def get_event_bus(request: Request) -> EventBus:
    """Шина событий приложения, созданная при старте"""
    return request.app.state.events
