from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric

from restaurant_pos.data.database import Base


class CustomerModel(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True, unique=True, index=True)
    email = Column(String, nullable=True)

    loyalty_points = Column(Integer, nullable=False, default=0)
    total_spent = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
