"""Properties: listing, pricing configuration, custom prices and blocked dates."""
import csv
import io
import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session
from app.config import get_settings
from app.database import get_db
from app.models.property import Property, PropertyBlockedDate, PropertyCustomPrice
from app.schemas.property import (
    BlockedDateResponse,
    BlockedDatesUpdate,
    CustomPriceResponse,
    CustomPricesUpdate,
    CustomPriceRangeResult,
    CustomPriceRangeUpdate,
    CustomPriceUploadResult,
    PricingConfig,
    PropertyCreate,
    PropertyResponse,
    PropertyUpdate,
)
from app.dependencies import client_info, get_actor, get_tenant_id, get_tenant_property
from app.services.audit_log import create_log, CATEGORY_AVAILABILITY_CHANGE, CATEGORY_PRICING_CHANGE, CATEGORY_STATUS_CHANGE
from app.services.holidays import load_holiday_calendar
from app.services.price_calendar import range_price, select_range_dates
from app.services.pricing_config import load_reserved_dates, rate_table_from_property, seasonal_modifiers_from_property

router = APIRouter(prefix="/properties", tags=["properties"])
settings = get_settings()

# Fields whose change alters quotes; logged as pricing_change
_PRICING_FIELDS = {
    "base_price_per_night", "price_per_extra_guest", "cleaning_fee", "minimum_nights", "base_guest_count",
    "max_guests", "payment_method_surcharges", "weekend_surcharge_pct", "holiday_surcharge_pct",
    "december_surcharge_pct", "high_season_surcharge_pct", "high_season_months", "region_code",
}
_NULLABLE_FIELDS = {"city", "state", "max_guests", "payment_method_surcharges", "high_season_months"}
_MAX_UPLOAD_ROWS = 2000

_PLAIN_PRICE = re.compile(r"^\d+(\.\d{1,2})?$")
_BR_PRICE = re.compile(r"^\d{1,3}(\.\d{3})*(,\d{1,2})?$|^\d+,\d{1,2}$")


def _surcharges_to_json(surcharges) -> dict[str, str] | None:
    if surcharges is None:
        return None
    return {method.value: str(pct) for method, pct in surcharges.items()}


def _parse_csv_date(raw: str) -> date:
    raw = (raw or "").strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid date {raw!r} (use YYYY-MM-DD or DD/MM/YYYY)")


def _parse_csv_price(raw: str) -> Decimal:
    """Accepts 1250.50, 1250,50 and 1.250,50. Ambiguous shapes such as 1,250.50 raise ValueError."""
    cleaned = (raw or "").replace("R$", "").strip()
    if _PLAIN_PRICE.match(cleaned):
        return Decimal(cleaned)
    if _BR_PRICE.match(cleaned):
        return Decimal(cleaned.replace(".", "").replace(",", "."))
    raise ValueError(f"invalid price {raw!r} (use 1250.50 or 1.250,50, at most 2 decimals, not negative)")


@router.get("/", response_model=list[PropertyResponse])
def list_properties(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    inactive: bool = False,
):
    """List properties. Default: active only. inactive=true: soft-deleted only."""
    q = db.query(Property).filter(Property.tenant_id == tenant_id)
    if inactive:
        q = q.filter(Property.deleted_at.isnot(None))
    else:
        q = q.filter(Property.deleted_at.is_(None))
    return [PropertyResponse.model_validate(p) for p in q.order_by(Property.id).all()]


@router.post("/", response_model=PropertyResponse)
def create_property(
    request: Request,
    data: PropertyCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str | None = Depends(get_actor),
):
    prop = Property(
        tenant_id=tenant_id,
        name=data.name.strip(),
        city=data.city,
        state=data.state,
        region_code=(data.region_code or settings.default_holiday_region).upper()[:20],
        currency=(data.currency or settings.default_currency).upper()[:3],
        base_price_per_night=data.base_price_per_night,
        price_per_extra_guest=data.price_per_extra_guest,
        cleaning_fee=data.cleaning_fee,
        minimum_nights=data.minimum_nights,
        base_guest_count=data.base_guest_count,
        max_guests=data.max_guests,
        payment_method_surcharges=_surcharges_to_json(data.payment_method_surcharges),
        weekend_surcharge_pct=data.weekend_surcharge_pct,
        holiday_surcharge_pct=data.holiday_surcharge_pct,
        december_surcharge_pct=data.december_surcharge_pct,
        high_season_surcharge_pct=data.high_season_surcharge_pct,
        high_season_months=data.high_season_months,
    )
    db.add(prop)
    db.flush()
    ip, ua = client_info(request)
    create_log(
        db,
        CATEGORY_STATUS_CHANGE,
        "Property registered",
        f"Property registered: {prop.name} (id={prop.id}).",
        tenant_id=tenant_id,
        property_id=prop.id,
        actor=actor,
        ip_address=ip,
        user_agent=ua,
        meta={"property_id": prop.id, "name": prop.name, "base_price_per_night": data.base_price_per_night},
    )
    db.commit()
    db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(prop: Property = Depends(get_tenant_property)):
    return PropertyResponse.model_validate(prop)


@router.put("/{property_id}", response_model=PropertyResponse)
def update_property(
    request: Request,
    data: PropertyUpdate,
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    changes = {
        field: value for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field in _NULLABLE_FIELDS
    }
    old_values = {}
    for field, value in changes.items():
        if field == "payment_method_surcharges":
            value = _surcharges_to_json(data.payment_method_surcharges)
        elif field == "region_code" and value:
            value = value.upper()[:20]
        elif field == "currency" and value:
            value = value.upper()[:3]
        elif field == "name" and value:
            value = value.strip()
        old_values[field] = getattr(prop, field)
        setattr(prop, field, value)

    pricing_changed = sorted(set(changes) & _PRICING_FIELDS)
    if changes:
        ip, ua = client_info(request)
        create_log(
            db,
            CATEGORY_PRICING_CHANGE if pricing_changed else CATEGORY_STATUS_CHANGE,
            "Pricing updated" if pricing_changed else "Property updated",
            f"Property {prop.id} updated: {', '.join(sorted(changes))}.",
            tenant_id=prop.tenant_id,
            property_id=prop.id,
            actor=actor,
            ip_address=ip,
            user_agent=ua,
            meta={"old": old_values, "new": changes},
        )
    db.commit()
    db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.delete("/{property_id}")
def delete_property(
    request: Request,
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    """Soft delete: the property disappears from listings and cannot be quoted; reactivate to restore."""
    prop.deleted_at = datetime.now(timezone.utc)
    ip, ua = client_info(request)
    create_log(
        db,
        CATEGORY_STATUS_CHANGE,
        "Property deactivated",
        f"Property {prop.name} (id={prop.id}) deactivated.",
        tenant_id=prop.tenant_id,
        property_id=prop.id,
        actor=actor,
        ip_address=ip,
        user_agent=ua,
    )
    db.commit()
    return {"status": "success", "message": "Property deactivated."}


@router.post("/{property_id}/reactivate", response_model=PropertyResponse)
def reactivate_property(
    property_id: int,
    request: Request,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str | None = Depends(get_actor),
):
    prop = db.query(Property).filter(
        Property.id == property_id,
        Property.tenant_id == tenant_id,
        Property.deleted_at.isnot(None),
    ).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Inactive property not found")
    prop.deleted_at = None
    ip, ua = client_info(request)
    create_log(
        db,
        CATEGORY_STATUS_CHANGE,
        "Property reactivated",
        f"Property {prop.name} (id={prop.id}) reactivated.",
        tenant_id=tenant_id,
        property_id=prop.id,
        actor=actor,
        ip_address=ip,
        user_agent=ua,
    )
    db.commit()
    db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.get("/{property_id}/pricing", response_model=PricingConfig)
def get_pricing_config(prop: Property = Depends(get_tenant_property)):
    return PricingConfig(
        property_id=prop.id,
        rate_table=rate_table_from_property(prop),
        seasonal_modifiers=seasonal_modifiers_from_property(prop),
    )


# ── Custom prices ────────────────────────────────────────────────────────────


@router.get("/{property_id}/custom-prices", response_model=list[CustomPriceResponse])
def list_custom_prices(prop: Property = Depends(get_tenant_property)):
    return [CustomPriceResponse.model_validate(c) for c in prop.custom_prices]


def _upsert_custom_prices(prop: Property, prices: dict[date, Decimal]) -> None:
    existing = {c.date: c for c in prop.custom_prices}
    for day, price in prices.items():
        row = existing.get(day)
        if row:
            row.price = price
        else:
            prop.custom_prices.append(PropertyCustomPrice(date=day, price=price))


@router.put("/{property_id}/custom-prices", response_model=list[CustomPriceResponse])
def set_custom_prices(
    request: Request,
    data: CustomPricesUpdate,
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    prices = {entry.date: entry.price for entry in data.prices}
    removed = []
    if data.replace:
        for row in list(prop.custom_prices):
            if row.date not in prices:
                removed.append(row.date)
                prop.custom_prices.remove(row)
    _upsert_custom_prices(prop, prices)
    ip, ua = client_info(request)
    create_log(
        db,
        CATEGORY_PRICING_CHANGE,
        "Custom prices updated",
        f"{len(prices)} custom price(s) set for property {prop.id}" + (f", {len(removed)} removed." if removed else "."),
        tenant_id=prop.tenant_id,
        property_id=prop.id,
        actor=actor,
        ip_address=ip,
        user_agent=ua,
        meta={"prices": prices, "removed": removed},
    )
    db.commit()
    db.refresh(prop)
    return [CustomPriceResponse.model_validate(c) for c in prop.custom_prices]


@router.delete("/{property_id}/custom-prices/{day}")
def delete_custom_price(
    day: date,
    request: Request,
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    row = next((c for c in prop.custom_prices if c.date == day), None)
    if not row:
        raise HTTPException(status_code=404, detail="No custom price for this date")
    old_price = row.price
    prop.custom_prices.remove(row)
    ip, ua = client_info(request)
    create_log(
        db,
        CATEGORY_PRICING_CHANGE,
        "Custom price removed",
        f"Custom price for {day.isoformat()} removed from property {prop.id}.",
        tenant_id=prop.tenant_id,
        property_id=prop.id,
        actor=actor,
        ip_address=ip,
        user_agent=ua,
        meta={"date": day, "old_price": old_price},
    )
    db.commit()
    return {"status": "success"}


@router.post("/{property_id}/custom-prices/upload", response_model=CustomPriceUploadResult)
def upload_custom_prices(
    request: Request,
    file: UploadFile = File(...),
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    """CSV with columns date,price (header optional). Valid rows are imported; invalid rows are reported."""
    content = file.file.read()
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded CSV")
    reader = csv.reader(io.StringIO(text))
    prices: dict[date, Decimal] = {}
    errors: list[str] = []
    for line_no, row in enumerate(reader, start=1):
        if not row or not any(cell.strip() for cell in row):
            continue
        if line_no == 1 and row[0].strip().lower() in ("date", "data"):
            continue
        if len(prices) + len(errors) >= _MAX_UPLOAD_ROWS:
            errors.append(f"line {line_no}: row limit of {_MAX_UPLOAD_ROWS} reached, rest ignored")
            break
        if len(row) < 2:
            errors.append(f"line {line_no}: expected date,price")
            continue
        try:
            prices[_parse_csv_date(row[0])] = _parse_csv_price(row[1])
        except ValueError as e:
            errors.append(f"line {line_no}: {e}")
    if prices:
        _upsert_custom_prices(prop, prices)
        ip, ua = client_info(request)
        create_log(
            db,
            CATEGORY_PRICING_CHANGE,
            "Custom prices imported",
            f"{len(prices)} custom price(s) imported from {file.filename or 'CSV'} for property {prop.id}.",
            tenant_id=prop.tenant_id,
            property_id=prop.id,
            actor=actor,
            ip_address=ip,
            user_agent=ua,
            meta={"filename": file.filename, "imported": len(prices), "failed": len(errors)},
        )
        db.commit()
    return CustomPriceUploadResult(imported=len(prices), failed=len(errors), errors=errors)


@router.post("/{property_id}/custom-prices/range", response_model=CustomPriceRangeResult)
def set_custom_price_range(
    request: Request,
    data: CustomPriceRangeUpdate,
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    """Bulk price a date range, optionally only its weekends and/or holidays. Nights already reserved keep their price."""
    price = range_price(Decimal(str(prop.base_price_per_night)), data.price, data.percentage)
    holidays = load_holiday_calendar(db, prop.region_code) if data.holidays_only else None
    selected, skipped = select_range_dates(
        data.start_date,
        data.end_date,
        reserved=load_reserved_dates(db, prop, data.start_date, data.end_date + timedelta(days=1)),
        holidays=holidays,
        weekends_only=data.weekends_only,
        holidays_only=data.holidays_only,
    )
    if selected:
        _upsert_custom_prices(prop, {day: price for day in selected})
        ip, ua = client_info(request)
        create_log(
            db,
            CATEGORY_PRICING_CHANGE,
            "Custom price range set",
            f"{len(selected)} date(s) from {data.start_date.isoformat()} to {data.end_date.isoformat()} "
            f"priced at {price} on property {prop.id}.",
            tenant_id=prop.tenant_id,
            property_id=prop.id,
            actor=actor,
            ip_address=ip,
            user_agent=ua,
            meta={
                "price": price,
                "percentage": data.percentage,
                "weekends_only": data.weekends_only,
                "holidays_only": data.holidays_only,
                "dates": selected,
                "skipped_reserved": skipped,
            },
        )
        db.commit()
    return CustomPriceRangeResult(price=price, applied=selected, skipped_reserved=skipped)


# ── Blocked dates ────────────────────────────────────────────────────────────


@router.get("/{property_id}/blocked-dates", response_model=list[BlockedDateResponse])
def list_blocked_dates(prop: Property = Depends(get_tenant_property)):
    return [BlockedDateResponse.model_validate(b) for b in prop.blocked_dates]


@router.put("/{property_id}/blocked-dates", response_model=list[BlockedDateResponse])
def add_blocked_dates(
    request: Request,
    data: BlockedDatesUpdate,
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    existing = {b.date: b for b in prop.blocked_dates}
    added = []
    for day in sorted(set(data.dates)):
        row = existing.get(day)
        if row:
            row.reason = data.reason
        else:
            prop.blocked_dates.append(PropertyBlockedDate(date=day, reason=data.reason))
            added.append(day)
    ip, ua = client_info(request)
    create_log(
        db,
        CATEGORY_AVAILABILITY_CHANGE,
        "Dates blocked",
        f"{len(added)} date(s) blocked on property {prop.id}.",
        tenant_id=prop.tenant_id,
        property_id=prop.id,
        actor=actor,
        ip_address=ip,
        user_agent=ua,
        meta={"dates": added, "reason": data.reason},
    )
    db.commit()
    db.refresh(prop)
    return [BlockedDateResponse.model_validate(b) for b in prop.blocked_dates]


@router.delete("/{property_id}/blocked-dates/{day}")
def unblock_date(
    day: date,
    request: Request,
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    row = next((b for b in prop.blocked_dates if b.date == day), None)
    if not row:
        raise HTTPException(status_code=404, detail="Date is not blocked")
    prop.blocked_dates.remove(row)
    ip, ua = client_info(request)
    create_log(
        db,
        CATEGORY_AVAILABILITY_CHANGE,
        "Date unblocked",
        f"{day.isoformat()} unblocked on property {prop.id}.",
        tenant_id=prop.tenant_id,
        property_id=prop.id,
        actor=actor,
        ip_address=ip,
        user_agent=ua,
        meta={"date": day},
    )
    db.commit()
    return {"status": "success"}
