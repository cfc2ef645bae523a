"""
Settings Routes (admin)

GET /admin/settings - All tabs
PUT /admin/settings/{tab} - Update one tab (account, integrations, ai, customization)
POST /admin/settings/logo - Upload the company logo
DELETE /admin/settings/logo - Remove the company logo
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Body
from pydantic import ValidationError

from hunter.core.auth import get_current_admin
from hunter.services.mongo_service import SettingsService
from hunter.utils.file_upload import store_logo, delete_public_path
from hunter.schemas.schemas import (
    AccountSettings, IntegrationSettings, AISettings, CustomizationSettings, SettingsResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/settings", tags=["Settings"])

TAB_SCHEMAS = {
    "account": AccountSettings,
    "integrations": IntegrationSettings,
    "ai": AISettings,
    "customization": CustomizationSettings,
}


def _settings() -> dict:
    doc = SettingsService().get() or {}
    return {tab: doc.get(tab) or {} for tab in TAB_SCHEMAS}


@router.get("", response_model=SettingsResponse)
async def get_settings_tabs(admin: dict = Depends(get_current_admin)):
    return _settings()


@router.post("/logo", response_model=SettingsResponse)
async def upload_logo(logo: UploadFile = File(...), admin: dict = Depends(get_current_admin)):
    previous = _settings()["customization"].get("logoUrl")
    path = await store_logo(logo)
    SettingsService().update_tab("customization", {"logoUrl": path})
    if previous:
        delete_public_path(previous)
    logger.info(f"Logo updated by user {admin['user_id']}")
    return _settings()


@router.delete("/logo", response_model=SettingsResponse)
async def remove_logo(admin: dict = Depends(get_current_admin)):
    previous = _settings()["customization"].get("logoUrl")
    if previous:
        delete_public_path(previous)
    SettingsService().unset_field("customization", "logoUrl")
    return _settings()


@router.put("/{tab}", response_model=SettingsResponse)
async def update_tab(tab: str, values: dict = Body(...), admin: dict = Depends(get_current_admin)):
    """Store the fields that were sent, validated against the tab's schema."""
    schema = TAB_SCHEMAS.get(tab)
    if schema is None:
        raise HTTPException(status_code=404, detail="Unknown settings tab")
    try:
        parsed = schema.model_validate(values)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors()[0]["msg"])

    fields = parsed.model_dump(exclude_unset=True, by_alias=True)
    if fields:
        SettingsService().update_tab(tab, fields)
    return _settings()
