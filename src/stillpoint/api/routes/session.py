"""
Session Endpoints - HTTP routes for the session lifecycle

Commands map 1:1 onto SessionController operations. A command that is not
valid in the current state answers 409 with the INVALID_TRANSITION error;
every successful command answers with the resulting session status.
"""

from fastapi import APIRouter, Depends

from stillpoint.api.dependencies import get_service_container
from stillpoint.api.middleware.error_handler import UnknownSceneError
from stillpoint.api.schemas.session import (
    SessionStartRequest,
    SessionMuteRequest,
    SessionStatusResponse,
    SessionPresetsResponse,
)
from stillpoint.controllers.session_controller import SessionController
from stillpoint.models.enums import LogCategory
from stillpoint.models.errors import InvalidTransitionError
from stillpoint.services.service_container import ServiceContainer
from stillpoint.utils.format import parse_duration_minutes
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.API)

router = APIRouter(prefix="/session", tags=["Session"])


async def get_session_controller(
    services: ServiceContainer = Depends(get_service_container)
) -> SessionController:
    return services.session_controller


def _status(controller: SessionController) -> SessionStatusResponse:
    return SessionStatusResponse.from_status(controller.status())


def _require(accepted: bool, command: str, controller: SessionController) -> None:
    if not accepted:
        raise InvalidTransitionError(command, controller.state)


# ============================================================================
# GET ENDPOINTS
# ============================================================================

@router.get(
    "",
    response_model=SessionStatusResponse,
    summary="Session status",
    description="State, remaining time and progress of the live session"
)
async def get_status(
    controller: SessionController = Depends(get_session_controller)
) -> SessionStatusResponse:
    return _status(controller)


@router.get(
    "/presets",
    response_model=SessionPresetsResponse,
    summary="Setup options",
    description="Duration presets, duration bounds and available scenes"
)
async def get_presets(
    services: ServiceContainer = Depends(get_service_container)
) -> SessionPresetsResponse:
    cfg = services.config_manager.app.session
    return SessionPresetsResponse(
        preset_minutes=cfg.preset_minutes,
        default_minutes=cfg.default_duration_minutes,
        min_minutes=cfg.min_duration_minutes,
        max_minutes=cfg.max_duration_minutes,
        scenes=cfg.scenes,
        default_scene=cfg.default_scene,
    )


# ============================================================================
# COMMANDS
# ============================================================================

@router.post(
    "/start",
    response_model=SessionStatusResponse,
    summary="Start a session",
    description="Start a countdown of `minutes` with the chosen scene (idle only)"
)
async def start_session(
    request: SessionStartRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> SessionStatusResponse:
    cfg = services.config_manager.app.session
    controller = services.session_controller

    minutes = request.minutes if request.minutes is not None else cfg.default_duration_minutes
    duration_ms = parse_duration_minutes(
        minutes,
        min_minutes=cfg.min_duration_minutes,
        max_minutes=cfg.max_duration_minutes
    )

    scene = request.scene or cfg.default_scene
    if scene not in cfg.scenes:
        raise UnknownSceneError(scene, cfg.scenes)

    log.info("Start requested", minutes=minutes, scene=scene)
    _require(await controller.start(duration_ms, scene), "start", controller)
    return _status(controller)


@router.post("/pause", response_model=SessionStatusResponse, summary="Pause the countdown")
async def pause_session(
    controller: SessionController = Depends(get_session_controller)
) -> SessionStatusResponse:
    _require(await controller.pause(), "pause", controller)
    return _status(controller)


@router.post("/resume", response_model=SessionStatusResponse, summary="Resume the countdown")
async def resume_session(
    controller: SessionController = Depends(get_session_controller)
) -> SessionStatusResponse:
    _require(await controller.resume(), "resume", controller)
    return _status(controller)


@router.post("/stop", response_model=SessionStatusResponse, summary="End the session early")
async def stop_session(
    controller: SessionController = Depends(get_session_controller)
) -> SessionStatusResponse:
    _require(await controller.stop(), "stop", controller)
    return _status(controller)


@router.post(
    "/restart",
    response_model=SessionStatusResponse,
    summary="Restart the session",
    description="Start over with the original duration and scene"
)
async def restart_session(
    controller: SessionController = Depends(get_session_controller)
) -> SessionStatusResponse:
    _require(await controller.restart(), "restart", controller)
    return _status(controller)


@router.post(
    "/dismiss",
    response_model=SessionStatusResponse,
    summary="Dismiss the completion prompt",
    description="Only accepted once the completion cue has finished"
)
async def dismiss_session(
    controller: SessionController = Depends(get_session_controller)
) -> SessionStatusResponse:
    _require(await controller.dismiss(), "dismiss", controller)
    return _status(controller)


@router.post("/mute", response_model=SessionStatusResponse, summary="Mute or unmute ambient audio")
async def mute_session(
    request: SessionMuteRequest,
    controller: SessionController = Depends(get_session_controller)
) -> SessionStatusResponse:
    _require(controller.set_muted(request.muted), "mute", controller)
    return _status(controller)
