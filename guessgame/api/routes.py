from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from guessgame.api.deps import get_session_runtime
from guessgame.api.models import AnswerRequest, SessionPhase, SessionResponse, SessionState
from guessgame.engine import EngineResult, InvalidTransitionError, PoolEmptyError
from guessgame.runtime import SessionRuntime, broadcast_result
from guessgame.websocket_hub import hub

router = APIRouter()


async def _respond(runtime: SessionRuntime, result: EngineResult) -> SessionResponse:
    # Disarm the timer in the same request that leaves running.
    if result.state.phase != SessionPhase.running:
        runtime.ticker.cancel()
    await broadcast_result(result)
    return SessionResponse(state=result.state, applied=result.applied, summary=result.summary)


def _conflict(e: InvalidTransitionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.websocket("/ws/session")
async def session_updates_ws(websocket: WebSocket) -> None:
    await hub.connect(websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(websocket)
    except Exception:
        await hub.disconnect(websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/session", response_model=SessionState)
async def get_session_route(runtime: SessionRuntime = Depends(get_session_runtime)) -> SessionState:
    return runtime.engine.state


@router.post("/session/start", response_model=SessionResponse)
async def start_session_route(runtime: SessionRuntime = Depends(get_session_runtime)) -> SessionResponse:
    try:
        result = runtime.engine.start()
    except PoolEmptyError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    if runtime.settings.server_ticker:
        runtime.ticker.start()
    return await _respond(runtime, result)


@router.post("/session/answer", response_model=SessionResponse)
async def submit_answer_route(
    payload: AnswerRequest,
    runtime: SessionRuntime = Depends(get_session_runtime),
) -> SessionResponse:
    try:
        result = runtime.engine.submit_answer(payload.text)
    except InvalidTransitionError as e:
        raise _conflict(e) from e
    if result.applied and result.state.phase == SessionPhase.running:
        runtime.ticker.rearm()
    return await _respond(runtime, result)


@router.post("/session/tick", response_model=SessionResponse)
async def tick_route(runtime: SessionRuntime = Depends(get_session_runtime)) -> SessionResponse:
    """Advance the countdown by one second.

    For drivers that own their timer; leave GUESSGAME_SERVER_TICKER off when using it.
    """

    try:
        result = runtime.engine.tick()
    except InvalidTransitionError as e:
        raise _conflict(e) from e
    return await _respond(runtime, result)


@router.post("/session/end", response_model=SessionResponse)
async def end_session_route(runtime: SessionRuntime = Depends(get_session_runtime)) -> SessionResponse:
    try:
        result = runtime.engine.end()
    except InvalidTransitionError as e:
        raise _conflict(e) from e
    return await _respond(runtime, result)
