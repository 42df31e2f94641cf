from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import asyncio
import json
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


async def relay_events(websocket: WebSocket, queue: asyncio.Queue) -> None:
    """Пересылка событий шины клиенту до отключения"""
    while True:
        event = await queue.get()
        await websocket.send_text(json.dumps(event.to_message()))


async def discard_incoming(websocket: WebSocket) -> None:
    """Чтение сокета, чтобы сразу заметить отключение клиента"""
    while True:
        await websocket.receive_text()


async def serve_updates(websocket: WebSocket, queue: asyncio.Queue) -> None:
    """Пересылка и чтение идут параллельно, пока одно из них не завершится"""
    tasks = {
        asyncio.create_task(relay_events(websocket, queue)),
        asyncio.create_task(discard_incoming(websocket)),
    }
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    for task in done:
        task.result()


@router.websocket("/updates")
async def updates_endpoint(websocket: WebSocket):
    """WebSocket эндпоинт ленты обновлений"""
    events = websocket.app.state.events
    queue = events.listen()

    try:
        await websocket.accept()
        logger.info(f"Update feed client connected ({events.subscriber_count} subscribers)")
        await serve_updates(websocket, queue)
    except WebSocketDisconnect:
        logger.info("Update feed client disconnected")
    finally:
        events.unlisten(queue)
