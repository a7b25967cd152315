"""
Unit tests for ContractService.
"""
import pytest
from decimal import Decimal

from models import DoctorContract
from services.closing_types import ContractKind
from services.contract_service import ContractService


class TestUpsertContract:
    """Test creating and replacing contracts."""

    def test_create_hourly_contract(self, db_session, clinic, doctor):
        """A new contract is created active."""
        contract = ContractService.upsert_contract(
            db_session, clinic.id, doctor.id, "hourly_rental", Decimal('150.00')
        )

        assert contract.id is not None
        assert contract.contract_kind == "hourly_rental"
        assert contract.rate == Decimal('150.00')
        assert contract.is_active is True

    def test_upsert_replaces_existing(self, db_session, clinic, doctor):
        """Saving again updates the single contract instead of adding one."""
        first = ContractService.upsert_contract(
            db_session, clinic.id, doctor.id, ContractKind.HOURLY_RENTAL, Decimal('150')
        )
        second = ContractService.upsert_contract(
            db_session, clinic.id, doctor.id, ContractKind.REVENUE_SHARE, Decimal('30')
        )

        assert second.id == first.id
        assert second.contract_kind == "revenue_share"
        count = db_session.query(DoctorContract).filter(
            DoctorContract.clinic_id == clinic.id,
            DoctorContract.user_id == doctor.id
        ).count()
        assert count == 1

    def test_upsert_reactivates(self, db_session, clinic, doctor):
        """Saving a deactivated contract makes it active again."""
        ContractService.upsert_contract(db_session, clinic.id, doctor.id, "hourly_rental", Decimal('100'))
        ContractService.deactivate_contract(db_session, clinic.id, doctor.id)

        contract = ContractService.upsert_contract(db_session, clinic.id, doctor.id, "hourly_rental", Decimal('120'))

        assert contract.is_active is True
        assert contract.rate == Decimal('120')

    def test_unknown_kind(self, db_session, clinic, doctor):
        with pytest.raises(ValueError, match="Unknown contract kind"):
            ContractService.upsert_contract(db_session, clinic.id, doctor.id, "per_patient", Decimal('10'))

    @pytest.mark.parametrize("rate", [Decimal('0'), Decimal('-5')])
    def test_rate_must_be_positive(self, db_session, clinic, doctor, rate):
        with pytest.raises(ValueError, match="rate must be positive"):
            ContractService.upsert_contract(db_session, clinic.id, doctor.id, "hourly_rental", rate)

    def test_revenue_share_capped_at_100(self, db_session, clinic, doctor):
        """A percentage above 100 is rejected; hourly rates are not capped."""
        with pytest.raises(ValueError):
            ContractService.upsert_contract(db_session, clinic.id, doctor.id, "revenue_share", Decimal('120'))

        contract = ContractService.upsert_contract(db_session, clinic.id, doctor.id, "hourly_rental", Decimal('120'))
        assert contract.rate == Decimal('120')

    def test_user_must_be_doctor_of_clinic(self, db_session, clinic, other_clinic, factories):
        """Admins and members of other clinics cannot get a contract."""
        admin, _ = factories.user(db_session, clinic, full_name="Admin", email="admin@example.com", roles=["admin"])
        outsider, _ = factories.user(db_session, other_clinic, full_name="Fora", email="fora@example.com")

        with pytest.raises(ValueError, match="Doctor not found in clinic"):
            ContractService.upsert_contract(db_session, clinic.id, admin.id, "hourly_rental", Decimal('100'))
        with pytest.raises(ValueError, match="Doctor not found in clinic"):
            ContractService.upsert_contract(db_session, clinic.id, outsider.id, "hourly_rental", Decimal('100'))


class TestListAndDeactivate:
    """Test listing and deactivating contracts."""

    def test_list_doctors_with_contracts(self, db_session, clinic, doctor, second_doctor, factories):
        """Doctors are listed by name; those without a contract have empty terms."""
        factories.user(db_session, clinic, full_name="Admin", email="admin@example.com", roles=["admin"])
        factories.user(db_session, clinic, full_name="Dr. Inativo", email="old@example.com", is_active=False)
        ContractService.upsert_contract(db_session, clinic.id, doctor.id, "hourly_rental", Decimal('150'))

        doctors = ContractService.list_doctors_with_contracts(db_session, clinic.id)

        assert [d['full_name'] for d in doctors] == ["Dr. Bruno Lima", "Dra. Ana Souza"]
        bruno, ana = doctors
        assert bruno['contract_kind'] is None
        assert bruno['rate'] is None
        assert bruno['is_active'] is False
        assert ana['contract_kind'] == "hourly_rental"
        assert ana['rate'] == Decimal('150')
        assert ana['is_active'] is True

    def test_deactivate(self, db_session, clinic, doctor):
        ContractService.upsert_contract(db_session, clinic.id, doctor.id, "hourly_rental", Decimal('150'))

        contract = ContractService.deactivate_contract(db_session, clinic.id, doctor.id)

        assert contract.is_active is False
        assert ContractService.get_contract(db_session, clinic.id, doctor.id).is_active is False

    def test_deactivate_missing(self, db_session, clinic, doctor):
        with pytest.raises(ValueError, match="Contract not found"):
            ContractService.deactivate_contract(db_session, clinic.id, doctor.id)
