"""
Integration tests for the financial API endpoints.

Tests GET /api/clinics/{clinic_id}/closing (and /closing/table) together with
the expense and revenue ledger endpoints that feed it.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import patch

from fastapi.testclient import TestClient

from main import app
from models import ClinicExpense
from services.closing_data_source import SqlAlchemyClosingDataSource
from services.closing_errors import DataUnavailable
from utils.datetime_utils import BRAZIL_TZ


@pytest.fixture
def client(db_session):
    """Create test client with database session override."""
    from core.database import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def hourly_doctor(db_session, clinic, doctor, room, factories):
    """Doctor renting at 150.00/hour with a 2-hour booking on 2024-03-05."""
    factories.contract(db_session, clinic, doctor, "hourly_rental", "150.00")
    factories.booking(
        db_session, clinic, room, doctor,
        datetime(2024, 3, 5, 10, 0, tzinfo=BRAZIL_TZ),
        datetime(2024, 3, 5, 12, 0, tzinfo=BRAZIL_TZ)
    )
    return doctor


class TestClosingAPI:
    """Test the monthly closing endpoint."""

    def test_single_doctor_scenario(self, client: TestClient, clinic, hourly_doctor):
        """2 hours at 150.00 → one row billed 300.00."""
        response = client.get(f"/api/clinics/{clinic.id}/closing", params={"month": 3, "year": 2024})

        assert response.status_code == 200
        data = response.json()
        assert data["clinic_id"] == clinic.id
        assert data["month"] == 3
        assert data["year"] == 2024
        assert len(data["rows"]) == 1
        row = data["rows"][0]
        assert row["doctor_id"] == hourly_doctor.id
        assert row["doctor_name"] == "Dra. Ana Souza"
        assert row["contract_kind"] == "hourly_rental"
        assert row["booked_hours"] == 2.0
        assert row["room_cost"] == 300.0
        assert row["partnership_revenue"] == 0.0
        assert row["product_cost"] == 0.0
        assert row["shared_expense_share"] == 0.0
        assert row["final_invoice_amount"] == 300.0
        assert data["totals"]["final_invoice_amount"] == 300.0

    def test_shared_expense_split(self, client: TestClient, db_session, clinic, hourly_doctor, second_doctor, room, factories):
        """A 200.00 expense is split 100.00/100.00 between two billed doctors."""
        factories.contract(db_session, clinic, second_doctor, "hourly_rental", "100.00")
        factories.booking(
            db_session, clinic, room, second_doctor,
            datetime(2024, 3, 6, 10, 0, tzinfo=BRAZIL_TZ),
            datetime(2024, 3, 6, 11, 0, tzinfo=BRAZIL_TZ)
        )
        db_session.add(ClinicExpense(
            clinic_id=clinic.id, description="Condomínio", amount=Decimal('200.00'), expense_date=date(2024, 3, 10)
        ))
        db_session.commit()

        response = client.get(f"/api/clinics/{clinic.id}/closing", params={"month": 3, "year": 2024})

        assert response.status_code == 200
        rows = response.json()["rows"]
        assert [r["doctor_name"] for r in rows] == ["Dr. Bruno Lima", "Dra. Ana Souza"]
        assert [r["shared_expense_share"] for r in rows] == [100.0, 100.0]
        assert [r["final_invoice_amount"] for r in rows] == [200.0, 400.0]
        assert response.json()["totals"]["shared_expense_share"] == 200.0

    def test_empty_month(self, client: TestClient, clinic, hourly_doctor):
        """A month without activity has no rows."""
        response = client.get(f"/api/clinics/{clinic.id}/closing", params={"month": 4, "year": 2024})

        assert response.status_code == 200
        assert response.json()["rows"] == []
        assert response.json()["totals"]["final_invoice_amount"] == 0.0

    def test_tenant_isolation(self, client: TestClient, clinic, other_clinic, hourly_doctor):
        """Another clinic never sees this clinic's activity."""
        response = client.get(f"/api/clinics/{other_clinic.id}/closing", params={"month": 3, "year": 2024})

        assert response.status_code == 200
        assert response.json()["rows"] == []

    @pytest.mark.parametrize("month", [0, 13])
    def test_invalid_month(self, client: TestClient, clinic, month):
        response = client.get(f"/api/clinics/{clinic.id}/closing", params={"month": month, "year": 2024})

        assert response.status_code == 400
        assert response.json()["type"] == "invalid_period"

    def test_non_numeric_month(self, client: TestClient, clinic):
        response = client.get(f"/api/clinics/{clinic.id}/closing", params={"month": "março", "year": 2024})

        assert response.status_code == 422

    def test_unknown_clinic(self, client: TestClient, clinic):
        response = client.get(f"/api/clinics/{clinic.id + 999}/closing", params={"month": 3, "year": 2024})

        assert response.status_code == 404
        assert response.json()["type"] == "tenant_not_found"

    def test_data_unavailable(self, client: TestClient, clinic, hourly_doctor):
        """A failing read turns into a 503 with no partial rows."""
        with patch.object(
            SqlAlchemyClosingDataSource, "list_room_bookings",
            side_effect=DataUnavailable("Could not read room bookings")
        ):
            response = client.get(f"/api/clinics/{clinic.id}/closing", params={"month": 3, "year": 2024})

        assert response.status_code == 503
        body = response.json()
        assert body["type"] == "data_unavailable"
        assert "rows" not in body

    def test_idempotent(self, client: TestClient, clinic, hourly_doctor):
        """Repeated requests return byte-identical bodies."""
        first = client.get(f"/api/clinics/{clinic.id}/closing", params={"month": 3, "year": 2024})
        second = client.get(f"/api/clinics/{clinic.id}/closing", params={"month": 3, "year": 2024})

        assert first.content == second.content

    def test_closing_table(self, client: TestClient, clinic, hourly_doctor):
        response = client.get(f"/api/clinics/{clinic.id}/closing/table", params={"month": 3, "year": 2024})

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Relatório de Fechamento - 3/2024"
        assert data["headers"] == ["Médico", "Aluguel", "Parceria", "Produtos", "Condomínio", "FATURA FINAL"]
        assert data["rows"] == [["Dra. Ana Souza", "R$ 300.00", "R$ 0.00", "R$ 0.00", "R$ 0.00", "R$ 300.00"]]


class TestExpenseAPI:
    """Test the shared expense endpoints."""

    def test_create_and_list(self, client: TestClient, clinic):
        response = client.post(
            f"/api/clinics/{clinic.id}/expenses",
            json={"description": "Condomínio", "amount": "200.00", "expense_date": "2024-03-05"}
        )
        assert response.status_code == 201
        assert response.json()["amount"] == 200.0

        client.post(
            f"/api/clinics/{clinic.id}/expenses",
            json={"description": "Luz", "amount": 80.5, "expense_date": "2024-04-02"}
        )

        march = client.get(f"/api/clinics/{clinic.id}/expenses", params={"month": 3, "year": 2024}).json()
        everything = client.get(f"/api/clinics/{clinic.id}/expenses").json()

        assert [e["description"] for e in march["expenses"]] == ["Condomínio"]
        assert march["total"] == 200.0
        assert [e["description"] for e in everything["expenses"]] == ["Luz", "Condomínio"]
        assert everything["total"] == 280.5

    def test_amount_must_be_positive(self, client: TestClient, clinic):
        response = client.post(
            f"/api/clinics/{clinic.id}/expenses",
            json={"description": "Luz", "amount": "0", "expense_date": "2024-03-05"}
        )

        assert response.status_code == 422

    def test_month_without_year(self, client: TestClient, clinic):
        response = client.get(f"/api/clinics/{clinic.id}/expenses", params={"month": 3})

        assert response.status_code == 400

    def test_unknown_clinic(self, client: TestClient, clinic):
        response = client.get(f"/api/clinics/{clinic.id + 999}/expenses")

        assert response.status_code == 404
        assert response.json()["detail"] == "Clínica não encontrada"


class TestRevenueEntryAPI:
    """Test the revenue ledger endpoint."""

    def test_revenue_feeds_revenue_share_closing(self, client: TestClient, db_session, clinic, doctor, factories):
        """Recorded revenue is billed through a revenue-share contract."""
        factories.contract(db_session, clinic, doctor, "revenue_share", "30")
        response = client.post(
            f"/api/clinics/{clinic.id}/revenue-entries",
            json={"user_id": doctor.id, "amount": "1000.00", "revenue_date": "2024-03-12"}
        )
        assert response.status_code == 201
        client.post(
            f"/api/clinics/{clinic.id}/expenses",
            json={"description": "Condomínio", "amount": "50.00", "expense_date": "2024-03-05"}
        )

        closing = client.get(f"/api/clinics/{clinic.id}/closing", params={"month": 3, "year": 2024}).json()

        row = closing["rows"][0]
        assert row["partnership_revenue"] == 300.0
        assert row["shared_expense_share"] == 50.0
        assert row["final_invoice_amount"] == -250.0

    def test_unknown_doctor(self, client: TestClient, clinic):
        response = client.post(
            f"/api/clinics/{clinic.id}/revenue-entries",
            json={"user_id": 999, "amount": "10.00", "revenue_date": "2024-03-12"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Doctor not found in clinic"
