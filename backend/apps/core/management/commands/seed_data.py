"""
Seed reference data for development.
Usage: python manage.py seed_data [--with-orders]
"""

from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand

from apps.catalog.models import Room, Service, ServiceGroup, ServiceType
from apps.core.sequences import create_with_code
from apps.records.models import MedicalRecord
from apps.service_orders.models import ServiceOrderStatus
from apps.service_orders.services import NewDetail, create_order
from apps.staff.models import Employee


class Command(BaseCommand):
    help = "Seed database with catalog, staff and medical records"

    def add_arguments(self, parser):
        parser.add_argument(
            "--with-orders",
            action="store_true",
            help="Also create one pending service order per medical record",
        )

    def handle(self, *args, **options):
        self.stdout.write("Seeding database...")

        # Staff
        employees = [
            Employee.objects.get_or_create(code="NV001", defaults={"full_name": "Nguyen Thi Lan"})[0],
            Employee.objects.get_or_create(code="NV002", defaults={"full_name": "Tran Van Minh"})[0],
            Employee.objects.get_or_create(code="NV003", defaults={"full_name": "Le Hoang Anh"})[0],
        ]
        self.stdout.write(f"  Created {len(employees)} employees")

        # Catalog
        lab = ServiceType.objects.get_or_create(name="Laboratory")[0]
        imaging = ServiceType.objects.get_or_create(name="Imaging")[0]
        procedure = ServiceType.objects.get_or_create(name="Procedure")[0]

        hematology = ServiceGroup.objects.get_or_create(name="Hematology", service_type=lab)[0]
        biochemistry = ServiceGroup.objects.get_or_create(name="Biochemistry", service_type=lab)[0]
        ultrasound = ServiceGroup.objects.get_or_create(name="Ultrasound", service_type=imaging)[0]
        minor = ServiceGroup.objects.get_or_create(name="Minor procedures", service_type=procedure)[0]

        lab_room = Room.objects.get_or_create(name="Lab 101")[0]
        imaging_room = Room.objects.get_or_create(name="Imaging 201")[0]
        treatment_room = Room.objects.get_or_create(name="Treatment 105")[0]

        services_data = [
            ("XN001", "Complete blood count", hematology, lab_room, "80000", True, None, None),
            ("XN002", "Fasting blood glucose", biochemistry, lab_room, "40000", True, "3.9", "6.4"),
            ("XN003", "HbA1c", biochemistry, lab_room, "120000", True, "4.0", "5.6"),
            ("SA001", "Abdominal ultrasound", ultrasound, imaging_room, "150000", True, None, None),
            ("TT001", "Wound dressing", minor, treatment_room, "50000", False, None, None),
        ]
        services = []
        for code, name, group, room, price, requires_result, ref_min, ref_max in services_data:
            service, _ = Service.objects.get_or_create(
                code=code,
                defaults={
                    "name": name,
                    "unit": "time",
                    "unit_price": Decimal(price),
                    "group": group,
                    "execution_room": room,
                    "requires_result": requires_result,
                    "reference_min": ref_min,
                    "reference_max": ref_max,
                },
            )
            services.append(service)
        self.stdout.write(f"  Created {len(services)} services")

        # Medical records
        patients = ["Pham Thu Ha", "Vo Quoc Bao", "Dang My Linh"]
        records = []
        for name in patients:
            record = MedicalRecord.objects.filter(patient_name=name).first()
            if record is None:
                record = create_with_code(
                    MedicalRecord,
                    "code",
                    settings.CLINIC["MEDICAL_RECORD_CODE_PREFIX"],
                    patient_name=name,
                )
            records.append(record)
        self.stdout.write(f"  Created {len(records)} medical records")

        if options["with_orders"]:
            for record, first, second in zip(records, services, services[1:]):
                order = create_order(
                    medical_record_id=record.id,
                    ordered_by_id=employees[0].id,
                    status=ServiceOrderStatus.PENDING,
                    details=[NewDetail(service_id=first.id), NewDetail(service_id=second.id)],
                )
                self.stdout.write(f"  Created service order {order.code} for {record.code}")

        self.stdout.write(self.style.SUCCESS("Database seeded successfully!"))
