from datetime import date, datetime, time

from clinic.models.appointment import AppointmentStatus
from clinic.services.availability_service import AvailabilityService

from .factories import create_appointment, create_doctor, create_patient

DAY = date(2025, 7, 1)


class TestAvailabilityResolver:

    def test_unbooked_pattern_is_free(self, db):
        """Doctor with 09:00-10:00 and no bookings has that slot free."""
        doctor = create_doctor(db, available_times=["09:00 - 10:00"])

        slots = AvailabilityService(db).resolve(doctor.id, DAY)

        assert [(s.date, s.start, s.end) for s in slots] == [(DAY, time(9, 0), time(10, 0))]

    def test_booked_pattern_is_removed(self, db):
        doctor = create_doctor(db, available_times=["09:00 - 10:00"])
        patient = create_patient(db)
        create_appointment(db, doctor, patient, datetime(2025, 7, 1, 9, 0))

        assert AvailabilityService(db).resolve(doctor.id, DAY) == []

    def test_partial_overlap_blocks_pattern(self, db):
        """An appointment at 09:30 runs until 10:30 and blocks both neighbours."""
        doctor = create_doctor(db, available_times=["09:00 - 10:00", "10:00 - 11:00", "11:00 - 12:00"])
        patient = create_patient(db)
        create_appointment(db, doctor, patient, datetime(2025, 7, 1, 9, 30))

        slots = AvailabilityService(db).resolve(doctor.id, DAY)

        assert [s.label for s in slots] == ["11:00 - 12:00"]

    def test_order_follows_declared_patterns(self, db):
        doctor = create_doctor(db, available_times=["15:00 - 16:00", "09:00 - 10:00", "11:00 - 12:00"])

        slots = AvailabilityService(db).resolve(doctor.id, DAY)

        assert [s.label for s in slots] == ["15:00 - 16:00", "09:00 - 10:00", "11:00 - 12:00"]

    def test_other_dates_do_not_block(self, db):
        doctor = create_doctor(db, available_times=["09:00 - 10:00"])
        patient = create_patient(db)
        create_appointment(db, doctor, patient, datetime(2025, 7, 2, 9, 0))

        assert [s.label for s in AvailabilityService(db).resolve(doctor.id, DAY)] == ["09:00 - 10:00"]

    def test_other_doctors_do_not_block(self, db):
        doctor = create_doctor(db, available_times=["09:00 - 10:00"])
        other = create_doctor(db, first_name="James", last_name="Wilson", specialty="Oncology")
        patient = create_patient(db)
        create_appointment(db, other, patient, datetime(2025, 7, 1, 9, 0))

        assert len(AvailabilityService(db).resolve(doctor.id, DAY)) == 1

    def test_unknown_doctor_returns_empty(self, db):
        assert AvailabilityService(db).resolve(999, DAY) == []

    def test_doctor_without_patterns_returns_empty(self, db):
        doctor = create_doctor(db, available_times=[])
        assert AvailabilityService(db).resolve(doctor.id, DAY) == []

    def test_malformed_pattern_is_skipped(self, db):
        doctor = create_doctor(db, available_times=["not a slot", "14:00 - 15:00"])

        slots = AvailabilityService(db).resolve(doctor.id, DAY)

        assert [s.label for s in slots] == ["14:00 - 15:00"]

    def test_cancelled_appointment_frees_slot(self, db):
        doctor = create_doctor(db, available_times=["09:00 - 10:00"])
        patient = create_patient(db)
        create_appointment(db, doctor, patient, datetime(2025, 7, 1, 9, 0), status=AppointmentStatus.CANCELLED)

        assert [s.label for s in AvailabilityService(db).resolve(doctor.id, DAY)] == ["09:00 - 10:00"]

    def test_completed_and_no_show_still_block(self, db):
        doctor = create_doctor(db, available_times=["09:00 - 10:00", "10:00 - 11:00"])
        patient = create_patient(db)
        create_appointment(db, doctor, patient, datetime(2025, 7, 1, 9, 0), status=AppointmentStatus.COMPLETED)
        create_appointment(db, doctor, patient, datetime(2025, 7, 1, 10, 0), status=AppointmentStatus.NO_SHOW)

        assert AvailabilityService(db).resolve(doctor.id, DAY) == []

    def test_pattern_change_applies_immediately(self, db):
        """Replacing the patterns is visible on the very next resolution."""
        doctor = create_doctor(db, available_times=["09:00 - 10:00"])
        service = AvailabilityService(db)
        assert [s.label for s in service.resolve(doctor.id, DAY)] == ["09:00 - 10:00"]

        doctor.available_times = ["13:00 - 14:00"]
        db.commit()

        assert [s.label for s in service.resolve(doctor.id, DAY)] == ["13:00 - 14:00"]

    def test_late_evening_appointment_within_day_window(self, db):
        doctor = create_doctor(db, available_times=["23:00 - 23:59"])
        patient = create_patient(db)
        create_appointment(db, doctor, patient, datetime(2025, 7, 1, 23, 0))

        assert AvailabilityService(db).resolve(doctor.id, DAY) == []
