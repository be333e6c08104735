# restaurant_pos/repos/customer_repo.py
from decimal import Decimal

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from restaurant_pos.data.models.customer import CustomerModel

MIN_LOOKUP_LENGTH = 3


class CustomerRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_customers(self) -> list[CustomerModel]:
        return list(self.db.execute(select(CustomerModel).order_by(CustomerModel.name)).scalars())

    def get_customer(self, customer_id: int) -> CustomerModel | None:
        return self.db.get(CustomerModel, customer_id)

    def find_customer(self, phone: str) -> CustomerModel | None:
        if not phone or len(phone) < MIN_LOOKUP_LENGTH:
            return None
        return self.db.execute(
            select(CustomerModel).where(CustomerModel.phone == phone)
        ).scalar_one_or_none()

    def search_customers(self, query: str) -> list[CustomerModel]:
        if not query:
            return self.list_customers()
        stmt = (
            select(CustomerModel)
            .where(
                or_(
                    CustomerModel.phone.contains(query),
                    func.lower(CustomerModel.name).contains(query.lower()),
                )
            )
            .order_by(CustomerModel.name)
        )
        return list(self.db.execute(stmt).scalars())

    def create_customer(self, customer: CustomerModel) -> CustomerModel:
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def apply_loyalty(self, customer_id: int, redeemed: int, earned: int, spent: Decimal) -> int:
        """
        Apply an order's loyalty deltas inside the caller's transaction.

        The WHERE clause re-checks the balance at write time; a rowcount of 0
        means the points were spent by another order in the meantime.
        """
        result = self.db.execute(
            update(CustomerModel)
            .where(CustomerModel.id == customer_id, CustomerModel.loyalty_points >= redeemed)
            .values(
                loyalty_points=CustomerModel.loyalty_points - redeemed + earned,
                total_spent=CustomerModel.total_spent + spent,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
