# backend/routes/settings.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.settings import StoreSettingsOut, StoreSettingsUpdate
from services.store_settings import get_store_settings, reset_store_settings
from utils.audit import write_log, client_ip
from utils.responses import ApiResponse, ok
from utils.tokenJWT import admin_only, any_staff

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=ApiResponse[StoreSettingsOut])
def read_settings(db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    return ok(get_store_settings(db))


@router.put("", response_model=ApiResponse[StoreSettingsOut])
def update_settings(
    payload: StoreSettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    row = get_store_settings(db)
    data = payload.model_dump(exclude_unset=True)
    for key, value in data.items():
        # Required columns keep their value when null is sent
        if value is None and key in ("store_name", "tax_percentage", "currency", "low_stock_threshold_default"):
            continue
        setattr(row, key, value)
    db.commit()
    db.refresh(row)

    write_log(db, user_id=current_user.id, action="SETTINGS_UPDATE", resource="settings",
              ip=client_ip(request), meta={"fields": sorted(data)})
    return ok(row, "Settings updated successfully")


@router.post("/reset", response_model=ApiResponse[StoreSettingsOut])
def reset_settings(request: Request, db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    row = reset_store_settings(db)
    write_log(db, user_id=current_user.id, action="SETTINGS_RESET", resource="settings", ip=client_ip(request))
    return ok(row, "Settings reset to defaults")
