"""
Customer Management Module

Customer profiles with contact details. Emails are unique across all
customers, active or not, compared without regard to case.
"""

from datetime import date, datetime
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import threading
import uuid
import re

from .storage import Repository, StorageInterface, StorageRecord
from .config import LedgerConfig, get_config
from .dates import utc_now, years_between
from .errors import CustomerNotFoundError, DuplicateEmailError, InvalidTransactionError
from .logging_config import get_logger, log_action


EMAIL_PATTERN = re.compile(r'^[A-Za-z0-9+_.-]+@(.+)$')
PHONE_PATTERN = re.compile(r'^\+?[1-9]\d{1,14}$')


@dataclass
class Customer(StorageRecord):
    """Bank customer"""
    first_name: str
    last_name: str
    email: str
    phone_number: str
    date_of_birth: date
    address: Optional[str] = None
    is_active: bool = True

    @classmethod
    def create(
        cls,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str,
        date_of_birth: date,
        address: Optional[str] = None,
        minimum_age: int = 18,
        today: Optional[date] = None
    ) -> 'Customer':
        """
        Build a validated customer with a generated id and timestamps

        Raises:
            InvalidTransactionError: If a required field is blank, the email or
                phone number is malformed, or the customer is under age
        """
        if not first_name or not first_name.strip():
            raise InvalidTransactionError("First name is required")
        if not last_name or not last_name.strip():
            raise InvalidTransactionError("Last name is required")
        if not email or not EMAIL_PATTERN.match(email):
            raise InvalidTransactionError(f"Invalid email format: {email}")
        if not phone_number or not PHONE_PATTERN.match(phone_number):
            raise InvalidTransactionError(f"Invalid phone number format: {phone_number}")
        if not isinstance(date_of_birth, date):
            raise InvalidTransactionError("Date of birth is required")
        if isinstance(date_of_birth, datetime):
            date_of_birth = date_of_birth.date()

        if today is None:
            today = utc_now().date()
        if date_of_birth > today:
            raise InvalidTransactionError("Date of birth cannot be in the future")
        if years_between(date_of_birth, today) < minimum_age:
            raise InvalidTransactionError(f"Customer must be at least {minimum_age} years old")

        now = utc_now()
        return cls(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.strip(),
            phone_number=phone_number,
            date_of_birth=date_of_birth,
            address=address
        )

    @property
    def full_name(self) -> str:
        """Get customer's full name"""
        return f"{self.first_name} {self.last_name}"

    @property
    def age(self) -> int:
        """Age in completed years as of today (UTC)"""
        return years_between(self.date_of_birth, utc_now().date())

    def activate(self) -> None:
        self.is_active = True
        self.updated_at = utc_now()

    def deactivate(self) -> None:
        self.is_active = False
        self.updated_at = utc_now()


class CustomerRepository(Repository[Customer]):
    """Keyed store of customers"""

    table_name = "customers"

    def _to_dict(self, entity: Customer) -> Dict[str, Any]:
        return entity.to_dict()

    def _from_dict(self, data: Dict[str, Any]) -> Customer:
        return Customer(
            id=data['id'],
            created_at=datetime.fromisoformat(data['created_at']),
            updated_at=datetime.fromisoformat(data['updated_at']),
            first_name=data['first_name'],
            last_name=data['last_name'],
            email=data['email'],
            phone_number=data['phone_number'],
            date_of_birth=date.fromisoformat(data['date_of_birth']),
            address=data.get('address'),
            is_active=data['is_active']
        )

    def find_by_email(self, email: str) -> Optional[Customer]:
        """Case-insensitive email lookup"""
        if not email:
            return None
        wanted = email.strip().lower()
        matches = self.find_where(lambda c: c.email.lower() == wanted)
        return matches[0] if matches else None

    def exists_by_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def find_all_active(self) -> List[Customer]:
        return self.find_by(is_active=True)


class CustomerService:
    """
    Creates and looks up customers
    """

    def __init__(
        self,
        repository: Optional[CustomerRepository] = None,
        config: Optional[LedgerConfig] = None,
        storage: Optional[StorageInterface] = None
    ):
        self.repository = repository or CustomerRepository(storage)
        self.config = config or get_config()
        self.logger = get_logger("bank_ledger.customers")
        # Guards every read-modify-write, including the email uniqueness check
        self._lock = threading.Lock()

    def create_customer(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str,
        date_of_birth: date,
        address: Optional[str] = None
    ) -> Customer:
        """
        Register a new customer

        Returns:
            The persisted Customer

        Raises:
            DuplicateEmailError: If any customer already uses the email
            InvalidTransactionError: If the customer fields are invalid
        """
        with self._lock:
            if email and self.repository.exists_by_email(email):
                log_action(
                    self.logger, "warning", f"Duplicate customer email: {email}",
                    action="create_customer", resource="customer"
                )
                raise DuplicateEmailError(email)

            customer = Customer.create(
                first_name=first_name,
                last_name=last_name,
                email=email,
                phone_number=phone_number,
                date_of_birth=date_of_birth,
                address=address,
                minimum_age=self.config.minimum_customer_age
            )
            self.repository.save(customer)

        log_action(
            self.logger, "info", f"Customer created: {customer.id}",
            action="create_customer", resource=f"customer:{customer.id}",
            extra={"email": customer.email}
        )
        return customer

    def get_customer(self, customer_id: str) -> Customer:
        customer = self.repository.find_by_id(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer

    def get_customer_by_email(self, email: str) -> Customer:
        customer = self.repository.find_by_email(email)
        if customer is None:
            raise CustomerNotFoundError(email=email)
        return customer

    def get_all_customers(self) -> List[Customer]:
        return self.repository.find_all()

    def get_all_active_customers(self) -> List[Customer]:
        return self.repository.find_all_active()

    def activate_customer(self, customer_id: str) -> Customer:
        return self._set_active(customer_id, True)

    def deactivate_customer(self, customer_id: str) -> Customer:
        return self._set_active(customer_id, False)

    def _set_active(self, customer_id: str, active: bool) -> Customer:
        with self._lock:
            customer = self.get_customer(customer_id)
            if active:
                customer.activate()
            else:
                customer.deactivate()
            self.repository.save(customer)

        state = "activated" if active else "deactivated"
        log_action(
            self.logger, "info", f"Customer {customer_id} {state}",
            action=f"customer_{state}", resource=f"customer:{customer_id}"
        )
        return customer

    def exists_by_id(self, customer_id: str) -> bool:
        return self.repository.exists_by_id(customer_id)

    def get_total_customer_count(self) -> int:
        return self.repository.count()
