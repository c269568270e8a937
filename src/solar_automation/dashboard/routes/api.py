"""REST API endpoints for records, settings and raw publishing."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from solar_automation.automation.store import RecordNotFound
from solar_automation.inverter.profiles import DuplicateInverterType, UnknownInverterType
from solar_automation.mqtt.topics import inverter_topic, universal_topic

router = APIRouter()
logger = logging.getLogger(__name__)


# ── Request models ───────────────────────────────────

class ConditionModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    device_type: str = Field(alias="deviceType")
    parameter: str
    operator: str
    value: float | str


class ActionModel(BaseModel):
    key: str
    value: Any = None


class RuleCreate(BaseModel):
    name: str
    conditions: list[ConditionModel] = Field(default_factory=list)
    actions: list[ActionModel] = Field(default_factory=list)
    days: list[str] = Field(default_factory=list)


class RuleUpdate(BaseModel):
    name: str | None = None
    conditions: list[ConditionModel] | None = None
    actions: list[ActionModel] | None = None
    days: list[str] | None = None


class ScheduleCreate(BaseModel):
    key: str
    value: Any = None
    day: str
    hour: int = Field(ge=0, le=23)


class ScheduleUpdate(BaseModel):
    key: str | None = None
    value: Any = None
    day: str | None = None
    hour: int | None = Field(None, ge=0, le=23)


class InverterSettingsRequest(BaseModel):
    type: str
    settings: dict[str, Any] = Field(default_factory=dict)


class InverterTypeUpdate(BaseModel):
    settings: dict[str, Any] = Field(default_factory=dict)


class PublishRequest(BaseModel):
    topic: str
    message: Any = None


def _not_found(message: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": message})


async def _publish_all(publisher, topics_values: list[tuple[str, Any]]) -> None:
    for topic, value in topics_values:
        await publisher.publish(topic, value)


# ── Live state ───────────────────────────────────────

@router.get("/state")
async def get_state(request: Request) -> dict:
    return request.app.state.state_store.snapshot()


# ── Universal settings ───────────────────────────────

@router.get("/universal-settings")
async def get_universal_settings(request: Request) -> dict:
    return request.app.state.profiles.universal


@router.post("/universal-settings")
async def update_universal_settings(
    updates: dict[str, Any], request: Request, background: BackgroundTasks,
) -> dict:
    """Merge settings, then publish every universal key."""
    profiles = request.app.state.profiles
    prefix = request.app.state.config.mqtt.topic_prefix
    settings = profiles.update_universal(updates)
    background.add_task(
        _publish_all,
        request.app.state.publisher,
        [(universal_topic(prefix, key), value) for key, value in settings.items()],
    )
    return settings


# ── Inverter profiles ────────────────────────────────

@router.get("/inverter-types")
async def list_inverter_types(request: Request) -> list[str]:
    return request.app.state.profiles.type_names()


@router.post("/inverter-types", status_code=201)
async def add_inverter_type(body: InverterSettingsRequest, request: Request):
    try:
        request.app.state.profiles.add_type(body.type, body.settings)
    except DuplicateInverterType:
        return JSONResponse(status_code=400, content={"error": "Inverter type already exists"})
    return {
        "message": "Inverter type added successfully",
        "type": body.type,
        "settings": body.settings,
    }


@router.put("/inverter-types/{type_name}")
async def update_inverter_type(type_name: str, body: InverterTypeUpdate, request: Request):
    try:
        settings = request.app.state.profiles.update_type(type_name, body.settings)
    except UnknownInverterType:
        return _not_found("Inverter type not found")
    return {"type": type_name, "settings": settings}


@router.delete("/inverter-types/{type_name}", status_code=204)
async def delete_inverter_type(type_name: str, request: Request):
    try:
        request.app.state.profiles.remove_type(type_name)
    except UnknownInverterType:
        return _not_found("Inverter type not found")
    return Response(status_code=204)


@router.get("/inverter-settings")
async def get_inverter_settings(request: Request) -> dict:
    profiles = request.app.state.profiles
    return {"type": profiles.current_type, "settings": profiles.current_settings}


@router.post("/inverter-settings")
async def set_inverter_settings(
    body: InverterSettingsRequest, request: Request, background: BackgroundTasks,
):
    """Select an inverter type and publish its effective settings."""
    profiles = request.app.state.profiles
    prefix = request.app.state.config.mqtt.topic_prefix
    try:
        settings = profiles.select(body.type, body.settings)
    except UnknownInverterType:
        return JSONResponse(status_code=400, content={"error": "Invalid inverter type"})
    background.add_task(
        _publish_all,
        request.app.state.publisher,
        [(inverter_topic(prefix, key), value) for key, value in settings.items()],
    )
    return {"type": profiles.current_type, "settings": settings}


# ── Automation rules ─────────────────────────────────

@router.get("/automation-rules")
async def list_rules(request: Request) -> list[dict]:
    return [r.to_dict() for r in request.app.state.automation.rules.records()]


@router.post("/automation-rules", status_code=201)
async def create_rule(body: RuleCreate, request: Request) -> dict:
    rule = request.app.state.automation.rules.add(body.model_dump(by_alias=True))
    return rule.to_dict()


@router.get("/automation-rules/{rule_id}")
async def get_rule(rule_id: str, request: Request):
    try:
        return request.app.state.automation.rules.get(rule_id).to_dict()
    except RecordNotFound:
        return _not_found("Rule not found")


@router.put("/automation-rules/{rule_id}")
async def update_rule(rule_id: str, body: RuleUpdate, request: Request):
    updates = body.model_dump(by_alias=True, exclude_unset=True)
    try:
        return request.app.state.automation.rules.update(rule_id, updates).to_dict()
    except RecordNotFound:
        return _not_found("Rule not found")


@router.delete("/automation-rules/{rule_id}", status_code=204)
async def delete_rule(rule_id: str, request: Request) -> Response:
    request.app.state.automation.rules.delete(rule_id)
    return Response(status_code=204)


# ── Scheduled settings ───────────────────────────────

@router.get("/scheduled-settings")
async def list_schedules(request: Request) -> list[dict]:
    return [s.to_dict() for s in request.app.state.automation.schedules.records()]


@router.post("/scheduled-settings", status_code=201)
async def create_schedule(body: ScheduleCreate, request: Request) -> dict:
    setting = request.app.state.automation.schedules.add(body.model_dump())
    return setting.to_dict()


@router.put("/scheduled-settings/{setting_id}")
async def update_schedule(setting_id: str, body: ScheduleUpdate, request: Request):
    updates = body.model_dump(exclude_unset=True)
    try:
        return request.app.state.automation.schedules.update(setting_id, updates).to_dict()
    except RecordNotFound:
        return _not_found("Scheduled setting not found")


@router.delete("/scheduled-settings/{setting_id}", status_code=204)
async def delete_schedule(setting_id: str, request: Request) -> Response:
    request.app.state.automation.schedules.delete(setting_id)
    return Response(status_code=204)


# ── Raw publish ──────────────────────────────────────

@router.post("/mqtt")
async def publish_message(body: PublishRequest, request: Request) -> dict:
    result = await request.app.state.publisher.publish(body.topic, body.message)
    return {"success": result.success, "topic": result.topic, "message": result.message}
