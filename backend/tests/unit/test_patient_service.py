"""
Unit tests for PatientService.
"""
import pytest

from models import Patient, PatientInteraction
from services.patient_service import PatientService


class TestPatientRegister:
    """Test creating, listing, searching and deleting patients."""

    def test_create_patient(self, db_session, clinic):
        patient = PatientService.create_patient(
            db_session, clinic.id, "  Beatriz Alves ",
            phone_number="11988887777", email="bia@example.com", cpf="123.456.789-00"
        )
        db_session.commit()

        assert patient.id is not None
        assert patient.full_name == "Beatriz Alves"
        assert patient.cpf == "123.456.789-00"
        assert patient.is_deleted is False
        assert patient.created_at is not None

    def test_blank_optional_fields_stored_as_none(self, db_session, clinic):
        patient = PatientService.create_patient(db_session, clinic.id, "Beatriz Alves", phone_number="", email="")

        assert patient.phone_number is None
        assert patient.email is None

    def test_name_required(self, db_session, clinic):
        with pytest.raises(ValueError, match="full_name is required"):
            PatientService.create_patient(db_session, clinic.id, "   ")

    def test_list_ordered_by_name(self, db_session, clinic, patient):
        PatientService.create_patient(db_session, clinic.id, "ana Ribeiro")
        PatientService.create_patient(db_session, clinic.id, "Bruno Costa")

        patients = PatientService.list_patients_for_clinic(db_session, clinic.id)

        assert [p.full_name for p in patients] == ["ana Ribeiro", "Bruno Costa", "Carlos Pereira"]

    def test_list_is_scoped_to_clinic(self, db_session, clinic, other_clinic, patient):
        PatientService.create_patient(db_session, other_clinic.id, "Paciente Norte")

        assert [p.full_name for p in PatientService.list_patients_for_clinic(db_session, clinic.id)] == ["Carlos Pereira"]

    @pytest.mark.parametrize("term", ["pereira", "CARLOS", "99990000"])
    def test_search(self, db_session, clinic, patient, term):
        PatientService.create_patient(db_session, clinic.id, "Bruno Costa", phone_number="21911112222")

        patients = PatientService.list_patients_for_clinic(db_session, clinic.id, search=term)

        assert [p.id for p in patients] == [patient.id]

    def test_search_by_cpf(self, db_session, clinic, patient):
        other = PatientService.create_patient(db_session, clinic.id, "Bruno Costa", cpf="987.654.321-00")

        patients = PatientService.list_patients_for_clinic(db_session, clinic.id, search="987.654")

        assert [p.id for p in patients] == [other.id]

    def test_delete_is_soft(self, db_session, clinic, patient):
        PatientService.delete_patient(db_session, clinic.id, patient.id)
        db_session.commit()

        assert PatientService.list_patients_for_clinic(db_session, clinic.id) == []
        stored = db_session.query(Patient).filter(Patient.id == patient.id).one()
        assert stored.is_deleted is True
        assert stored.deleted_at is not None

    def test_delete_twice(self, db_session, clinic, patient):
        PatientService.delete_patient(db_session, clinic.id, patient.id)

        with pytest.raises(ValueError, match="Patient not found"):
            PatientService.delete_patient(db_session, clinic.id, patient.id)

    def test_delete_patient_of_other_clinic(self, db_session, other_clinic, patient):
        with pytest.raises(ValueError, match="Patient not found"):
            PatientService.delete_patient(db_session, other_clinic.id, patient.id)


class TestPatientInteractions:
    """Test the patient contact log."""

    def test_add_and_list_newest_first(self, db_session, clinic, patient, doctor):
        first = PatientService.add_interaction(
            db_session, clinic.id, patient.id, "Ligação", "Confirmou retorno", handled_by_user_id=doctor.id
        )
        second = PatientService.add_interaction(db_session, clinic.id, patient.id, "WhatsApp", "Enviou fotos")
        db_session.commit()

        interactions = PatientService.list_interactions(db_session, clinic.id, patient.id)

        assert [i.id for i in interactions] == [second.id, first.id]
        assert interactions[1].handled_by_user_id == doctor.id
        assert interactions[1].interaction_type == "Ligação"

    def test_unknown_type(self, db_session, clinic, patient):
        with pytest.raises(ValueError, match="Unknown interaction type"):
            PatientService.add_interaction(db_session, clinic.id, patient.id, "Telegrama", "Oi")

    def test_summary_required(self, db_session, clinic, patient):
        with pytest.raises(ValueError, match="summary is required"):
            PatientService.add_interaction(db_session, clinic.id, patient.id, "Email", "  ")

    def test_staff_must_belong_to_clinic(self, db_session, clinic, other_clinic, patient, factories):
        outsider, _ = factories.user(db_session, other_clinic, "Dr. Externo", "externo@example.com")

        with pytest.raises(ValueError, match="Staff member not found"):
            PatientService.add_interaction(
                db_session, clinic.id, patient.id, "Consulta", "Avaliação", handled_by_user_id=outsider.id
            )

    def test_deleted_patient_has_no_log(self, db_session, clinic, patient):
        PatientService.add_interaction(db_session, clinic.id, patient.id, "Outro", "Nota")
        PatientService.delete_patient(db_session, clinic.id, patient.id)

        with pytest.raises(ValueError, match="Patient not found"):
            PatientService.list_interactions(db_session, clinic.id, patient.id)
        with pytest.raises(ValueError, match="Patient not found"):
            PatientService.add_interaction(db_session, clinic.id, patient.id, "Outro", "Nota")
        assert db_session.query(PatientInteraction).count() == 1
