"""
Service for managing doctor contracts.

A doctor has at most one contract per clinic. Saving a contract for a doctor
that already has one replaces its terms (upsert), which keeps the closing's
"one active contract per doctor" invariant.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from core.constants import MAX_REVENUE_SHARE_PERCENTAGE, ROLE_DOCTOR
from models import DoctorContract, UserClinicAssociation
from services.closing_types import ContractKind

logger = logging.getLogger(__name__)


class ContractService:
    """Service for doctor contract operations."""

    @staticmethod
    def list_doctors_with_contracts(db: Session, clinic_id: int) -> List[Dict[str, Any]]:
        """
        List the clinic's active doctors together with their contract terms.

        Args:
            db: Database session
            clinic_id: ID of the clinic

        Returns:
            List of dicts ordered by doctor name; contract fields are None for
            doctors without a contract
        """
        associations = db.query(UserClinicAssociation).filter(
            UserClinicAssociation.clinic_id == clinic_id,
            UserClinicAssociation.is_active == True
        ).all()
        # roles is a JSON list, filtered here to stay portable across databases
        doctors = [a for a in associations if a.has_role(ROLE_DOCTOR)]

        contracts = db.query(DoctorContract).filter(
            DoctorContract.clinic_id == clinic_id
        ).all()
        contract_lookup = {c.user_id: c for c in contracts}

        result: List[Dict[str, Any]] = []
        for association in sorted(doctors, key=lambda a: (a.full_name.casefold(), a.user_id)):
            contract = contract_lookup.get(association.user_id)
            result.append({
                'user_id': association.user_id,
                'full_name': association.full_name,
                'contract_kind': contract.contract_kind if contract else None,
                'rate': Decimal(str(contract.rate)) if contract else None,
                'is_active': contract.is_active if contract else False,
            })
        return result

    @staticmethod
    def get_contract(db: Session, clinic_id: int, user_id: int) -> Optional[DoctorContract]:
        """Get a doctor's contract in a clinic, active or not."""
        return db.query(DoctorContract).filter(
            DoctorContract.clinic_id == clinic_id,
            DoctorContract.user_id == user_id
        ).first()

    @staticmethod
    def upsert_contract(
        db: Session,
        clinic_id: int,
        user_id: int,
        contract_kind: Union[ContractKind, str],
        rate: Decimal
    ) -> DoctorContract:
        """
        Create or replace a doctor's contract.

        Args:
            db: Database session
            clinic_id: ID of the clinic
            user_id: ID of the doctor
            contract_kind: 'hourly_rental' or 'revenue_share'
            rate: Hourly price, or revenue percentage (0-100]

        Returns:
            The saved (active) contract

        Raises:
            ValueError: If the kind is unknown, the rate is out of range, or the
                user is not an active doctor of the clinic
        """
        try:
            kind = ContractKind(contract_kind)
        except ValueError as e:
            raise ValueError(f"Unknown contract kind: {contract_kind}") from e

        if rate <= 0:
            raise ValueError("rate must be positive")
        if kind == ContractKind.REVENUE_SHARE and rate > MAX_REVENUE_SHARE_PERCENTAGE:
            raise ValueError("revenue share percentage must be <= 100")

        association = db.query(UserClinicAssociation).filter(
            UserClinicAssociation.clinic_id == clinic_id,
            UserClinicAssociation.user_id == user_id,
            UserClinicAssociation.is_active == True
        ).first()
        if not association or not association.has_role(ROLE_DOCTOR):
            raise ValueError("Doctor not found in clinic")

        contract = ContractService.get_contract(db, clinic_id, user_id)
        if contract:
            contract.contract_kind = kind.value
            contract.rate = rate
            contract.is_active = True
        else:
            contract = DoctorContract(
                clinic_id=clinic_id,
                user_id=user_id,
                contract_kind=kind.value,
                rate=rate,
                is_active=True
            )
            db.add(contract)

        db.flush()
        logger.info(f"Saved {kind.value} contract for doctor {user_id} in clinic {clinic_id} (rate={rate})")
        return contract

    @staticmethod
    def deactivate_contract(db: Session, clinic_id: int, user_id: int) -> DoctorContract:
        """
        Deactivate a doctor's contract. The doctor is no longer billed.

        Raises:
            ValueError: If the doctor has no contract in the clinic
        """
        contract = ContractService.get_contract(db, clinic_id, user_id)
        if not contract:
            raise ValueError("Contract not found")

        contract.is_active = False
        db.flush()
        logger.info(f"Deactivated contract for doctor {user_id} in clinic {clinic_id}")
        return contract
