from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from restaurant_pos.data.models.customer import CustomerModel
from restaurant_pos.domain.errors import CustomerNotFoundError
from restaurant_pos.domain.schemas import CustomerCreate, CustomerRead
from restaurant_pos.repos.customer_repo import CustomerRepo
from restaurant_pos.utils.logging import get_logger

logger = get_logger(__name__)


class CustomerService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepo(db)

    def list_customers(self) -> list[CustomerRead]:
        return [CustomerRead.model_validate(c) for c in self.repo.list_customers()]

    def search_customers(self, query: str) -> list[CustomerRead]:
        return [CustomerRead.model_validate(c) for c in self.repo.search_customers(query.strip())]

    def find_customer(self, phone: str) -> CustomerRead | None:
        customer = self.repo.find_customer(phone.strip())
        return CustomerRead.model_validate(customer) if customer else None

    def get_customer(self, customer_id: int) -> CustomerRead:
        customer = self.repo.get_customer(customer_id)
        if not customer:
            raise CustomerNotFoundError(customer_id)
        return CustomerRead.model_validate(customer)

    def create_customer(self, payload: CustomerCreate) -> CustomerRead:
        customer = CustomerModel(
            name=payload.name,
            phone=payload.phone or None,
            email=payload.email or None,
            loyalty_points=0,
            total_spent=0,
        )
        try:
            created = self.repo.create_customer(customer)
        except IntegrityError:
            self.db.rollback()
            raise ValueError(f"Customer with phone {payload.phone} already exists")

        logger.info(f"Customer {created.id} created")
        return CustomerRead.model_validate(created)
