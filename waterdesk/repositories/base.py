from abc import ABC, abstractmethod

from waterdesk.models.bill import Bill, PaymentDetails
from waterdesk.models.customer import AccountProfile
from waterdesk.models.ticket import SupportTicket


class BillRepository(ABC):
    """Bill store. Implementations raise ``DataUnavailable`` when unreachable."""

    @abstractmethod
    def create(self, bill: Bill) -> Bill: ...

    @abstractmethod
    def get_by_id(self, bill_id: int) -> Bill | None: ...

    @abstractmethod
    def list_by_customer(self, customer_id: int) -> list[Bill]: ...

    @abstractmethod
    def mark_paid(self, bill_id: int, payment: PaymentDetails) -> Bill:
        """Apply the Unpaid -> Paid transition.

        Raises ``NotFound`` for an unknown id and ``AlreadyPaid`` when the bill
        is no longer Unpaid; the stored bill is left untouched in both cases.
        """
        ...


class CustomerRepository(ABC):
    @abstractmethod
    def create(self, profile: AccountProfile) -> AccountProfile: ...

    @abstractmethod
    def get_by_id(self, customer_id: int) -> AccountProfile | None: ...

    @abstractmethod
    def get_by_account_number(self, account_number: str) -> AccountProfile | None: ...

    @abstractmethod
    def list_all(self) -> list[AccountProfile]: ...


class TicketRepository(ABC):
    @abstractmethod
    def create(self, ticket: SupportTicket) -> SupportTicket: ...

    @abstractmethod
    def get_by_id(self, ticket_id: int) -> SupportTicket | None: ...

    @abstractmethod
    def list_by_customer(self, customer_id: int) -> list[SupportTicket]: ...
