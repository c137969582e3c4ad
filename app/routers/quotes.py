"""Price quotes for a stay at a property."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.property import Property
from app.schemas.pricing import QuoteBreakdown, QuoteError, QuoteRequest
from app.dependencies import get_tenant_property
from app.services.pricing_config import quote_property

router = APIRouter(prefix="/properties", tags=["quotes"])


def quote_error_exception(error: QuoteError) -> HTTPException:
    """409 for unavailable dates, 422 for every other rejected request. Detail carries the typed error."""
    return HTTPException(status_code=error.http_status, detail=error.model_dump(mode="json"))


@router.post("/{property_id}/quote", response_model=QuoteBreakdown)
def get_quote(
    data: QuoteRequest,
    prop: Property = Depends(get_tenant_property),
    db: Session = Depends(get_db),
):
    result = quote_property(db, prop, data)
    if isinstance(result, QuoteError):
        raise quote_error_exception(result)
    return result
