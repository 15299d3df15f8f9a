"""
Canal de eventos
================

WebSocket de solo empuje para refrescar dashboards. Cada fila confirmada de las
tablas observadas llega como {"tabla", "operacion", "id", "datos", "fecha"}.
Lo que se revierte con rollback no se emite. Los mensajes del cliente se ignoran.
"""
import asyncio
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from ...infrastructure.eventos import feed_inventario, CanalAsincrono

router = APIRouter(tags=["eventos"])
logger = logging.getLogger(__name__)


async def _esperar_cierre(websocket: WebSocket) -> None:
    while True:
        mensaje = await websocket.receive()
        if mensaje["type"] == "websocket.disconnect":
            return

@router.websocket("/eventos")
async def eventos(websocket: WebSocket):
    canal = CanalAsincrono(asyncio.get_running_loop())
    # Suscrito antes del handshake: todo commit posterior a la conexión llega
    cancelar = feed_inventario.suscribir(canal)
    cierre = None
    try:
        await websocket.accept()
        cierre = asyncio.create_task(_esperar_cierre(websocket))
        while True:
            siguiente = asyncio.create_task(canal.siguiente())
            listos, _ = await asyncio.wait({siguiente, cierre}, return_when=asyncio.FIRST_COMPLETED)
            if cierre in listos:
                siguiente.cancel()
                break
            await websocket.send_json(jsonable_encoder(siguiente.result()))
    except WebSocketDisconnect:
        pass
    finally:
        cancelar()
        if cierre is not None:
            cierre.cancel()
        logger.info("Canal de eventos cerrado (descartados=%s)", canal.descartados)
