from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.metrics.models import TVL_UPDATE_EVENT, TvlUpdateEvent

router = APIRouter()


@router.websocket("/ws")
@router.websocket("/ws/{topic}")
async def websocket_endpoint(websocket: WebSocket, topic: str = TVL_UPDATE_EVENT):
    if topic != TVL_UPDATE_EVENT:
        await websocket.close(code=1008)
        return

    manager = websocket.app.state.connection_manager
    store = websocket.app.state.metrics_store

    await manager.connect(websocket, topic)
    try:
        # Replay the most recent value to this client only
        latest = store.read_latest(store.protocol_id)
        if latest is not None:
            await manager.send_personal(websocket, topic, TvlUpdateEvent.from_sample(latest).model_dump())

        while True:
            # Keep connection open; client may not send messages.
            msg = await websocket.receive()
            if msg.get("type") == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    except RuntimeError:
        # Starlette raises if receive() is called after disconnect.
        pass
    finally:
        manager.disconnect(websocket, topic)


async def reject_unknown_websocket(websocket: WebSocket, path: str):
    # Registered last as a catch-all, ahead of the static mount which only speaks HTTP.
    await websocket.close(code=1008)
