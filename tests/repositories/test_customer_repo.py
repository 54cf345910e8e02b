import pytest
from sqlalchemy.exc import IntegrityError

from waterdesk.exceptions import DataUnavailable
from waterdesk.models.customer import AccountProfile


class TestSQLAlchemyCustomerRepository:
    def test_create(self, customer_repo):
        profile = customer_repo.create(
            AccountProfile(
                account_number="AGWA-25000009",
                display_name="Jose Rizal",
                service_type="Semi-Business",
                meter_size='3/4"',
                service_address="Calamba, Laguna",
            )
        )
        assert profile.id is not None
        assert len(profile.uuid) == 26
        assert profile.service_type == "Semi-Business"
        assert profile.meter_size == '3/4"'
        assert profile.account_status == "Active"
        assert profile.created_at is not None

    def test_get_by_account_number(self, customer_repo, customer):
        found = customer_repo.get_by_account_number("AGWA-25000001")
        assert found is not None
        assert found.id == customer.id
        assert customer_repo.get_by_account_number("missing") is None

    def test_get_by_id_missing(self, customer_repo):
        assert customer_repo.get_by_id(42) is None

    def test_list_all_ordered_by_account_number(self, customer_repo):
        customer_repo.create(AccountProfile(account_number="B-2"))
        customer_repo.create(AccountProfile(account_number="A-1"))
        assert [p.account_number for p in customer_repo.list_all()] == ["A-1", "B-2"]

    def test_duplicate_account_number(self, customer_repo, customer):
        with pytest.raises(DataUnavailable) as exc_info:
            customer_repo.create(AccountProfile(account_number="AGWA-25000001"))
        assert isinstance(exc_info.value.__cause__, IntegrityError)
