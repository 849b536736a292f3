"""
Unit tests for code sequences.
"""

import pytest

from apps.core import sequences
from apps.core.exceptions import ConflictError
from apps.core.sequences import create_with_code, format_code, highest_sequence, next_code
from apps.records.models import MedicalRecord
from apps.service_orders.services import create_order


class TestFormatCode:

    def test_pads_to_six_digits(self):
        assert format_code("PCD", 1) == "PCD000001"
        assert format_code("HD", 42) == "HD000042"

    def test_longer_sequences_are_not_truncated(self):
        assert format_code("HD", 1234567) == "HD1234567"


@pytest.mark.django_db
class TestNextCode:

    def test_first_code(self):
        assert next_code(MedicalRecord, "code", "BA") == "BA000001"

    def test_continues_from_highest_suffix(self):
        MedicalRecord.objects.create(code="BA000003", patient_name="A")
        MedicalRecord.objects.create(code="BA000009", patient_name="B")

        assert highest_sequence(MedicalRecord, "code", "BA") == 9
        assert next_code(MedicalRecord, "code", "BA") == "BA000010"

    def test_ignores_codes_with_other_shapes(self):
        MedicalRecord.objects.create(code="BA-LEGACY", patient_name="A")
        MedicalRecord.objects.create(code="XBA000050", patient_name="B")
        MedicalRecord.objects.create(code="BA000002", patient_name="C")

        assert next_code(MedicalRecord, "code", "BA") == "BA000003"

    def test_numeric_not_lexical_order(self):
        """BA1000000 is higher than BA999999 although it sorts first as text."""
        MedicalRecord.objects.create(code="BA999999", patient_name="A")
        MedicalRecord.objects.create(code="BA1000000", patient_name="B")

        assert highest_sequence(MedicalRecord, "code", "BA") == 1000000

    def test_wider_zero_padded_code_does_not_win(self):
        """BA0000010 is longer than BA000050 but its number is smaller."""
        MedicalRecord.objects.create(code="BA000050", patient_name="A")
        MedicalRecord.objects.create(code="BA0000010", patient_name="B")

        assert highest_sequence(MedicalRecord, "code", "BA") == 50
        assert next_code(MedicalRecord, "code", "BA") == "BA000051"

    def test_generated_order_code_follows_explicit_codes(self, medical_record):
        create_order(medical_record_id=medical_record.id, code="PCD000050")
        create_order(medical_record_id=medical_record.id, code="PCD0000010")

        order = create_order(medical_record_id=medical_record.id)

        assert order.code == "PCD000051"


@pytest.mark.django_db
class TestCreateWithCode:

    def test_creates_row_with_generated_code(self):
        record = create_with_code(MedicalRecord, "code", "BA", patient_name="Pham Thu Ha")
        assert record.code == "BA000001"

    def test_retries_after_collision(self, monkeypatch):
        """A candidate taken by a concurrent insert is skipped."""
        MedicalRecord.objects.create(code="BA000001", patient_name="Taken")
        candidates = iter(["BA000001", "BA000002"])
        monkeypatch.setattr(sequences, "next_code", lambda *args, **kwargs: next(candidates))

        record = create_with_code(MedicalRecord, "code", "BA", patient_name="New")

        assert record.code == "BA000002"
        assert MedicalRecord.objects.count() == 2

    def test_gives_up_after_max_attempts(self, monkeypatch, settings):
        settings.CLINIC = {**settings.CLINIC, "CODE_MAX_ATTEMPTS": 3}
        MedicalRecord.objects.create(code="BA000001", patient_name="Taken")
        monkeypatch.setattr(sequences, "next_code", lambda *args, **kwargs: "BA000001")

        with pytest.raises(ConflictError) as exc_info:
            create_with_code(MedicalRecord, "code", "BA", patient_name="New")

        assert exc_info.value.code == "CODE_SEQUENCE_EXHAUSTED"
        assert MedicalRecord.objects.count() == 1
