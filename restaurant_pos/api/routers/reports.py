from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from restaurant_pos.api.errors import http_error
from restaurant_pos.data.database import get_db
from restaurant_pos.domain.schemas import LoyaltyReportOut, SalesReportOut
from restaurant_pos.services.report_service import ReportService
from restaurant_pos.utils.settings import REPORT_DEFAULT_DAYS

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/sales", response_model=SalesReportOut)
def sales_report(
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    days: int = Query(REPORT_DEFAULT_DAYS, gt=0, le=366),
    db: Session = Depends(get_db),
):
    try:
        return ReportService(db).sales_report(start, end, days)
    except ValueError as e:
        raise http_error(e)


@router.get("/loyalty", response_model=LoyaltyReportOut)
def loyalty_report(db: Session = Depends(get_db)):
    return ReportService(db).loyalty_report()
