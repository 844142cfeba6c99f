from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.catalog.models import Category, Medicine
from modules.delivery.models import Courier

CATALOG = {
    "Pain Relief": [
        ("Paracetamol 500mg", Decimal("25.00"), False),
        ("Ibuprofen 400mg", Decimal("40.00"), False),
        ("Diclofenac Gel", Decimal("95.50"), False),
    ],
    "Antibiotics": [
        ("Amoxicillin 500mg", Decimal("120.00"), True),
        ("Azithromycin 250mg", Decimal("145.00"), True),
    ],
    "Cold & Flu": [
        ("Cetirizine 10mg", Decimal("30.00"), False),
        ("Cough Syrup 100ml", Decimal("85.00"), False),
    ],
    "Vitamins": [
        ("Vitamin C 1000mg", Decimal("199.00"), False),
        ("Vitamin D3 60K", Decimal("60.00"), False),
    ],
}

COURIERS = [
    ("rahul", "Rahul Kumar", "+919800000001"),
    ("priya", "Priya Sharma", "+919800000002"),
    ("arjun", "Arjun Singh", "+919800000003"),
]


class Command(BaseCommand):
    help = "Seed database with development catalog, couriers and an admin user."

    @transaction.atomic
    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        admin_created = self._seed_admin()
        medicines = self._seed_catalog()
        couriers = self._seed_couriers()

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"admin={admin_created}, "
                f"categories={len(CATALOG)}, "
                f"medicines={len(medicines)}, "
                f"couriers={len(couriers)}"
            )
        )

    def _seed_admin(self) -> bool:
        User = get_user_model()
        if User.objects.filter(username="admin").exists():
            return False
        User.objects.create_superuser("admin", password="admin123")
        return True

    def _seed_catalog(self) -> list[Medicine]:
        self.stdout.write("Creating catalog...")
        medicines: list[Medicine] = []
        for category_name, items in CATALOG.items():
            category, _ = Category.objects.get_or_create(name=category_name)
            for name, price, requires_prescription in items:
                medicine, _ = Medicine.objects.get_or_create(
                    name=name,
                    category=category,
                    defaults={
                        "price": price,
                        "stock": random.randint(10, 200),
                        "requires_prescription": requires_prescription,
                    },
                )
                medicines.append(medicine)
        self.stdout.write(self.style.SUCCESS("Creating catalog... Done!"))
        return medicines

    def _seed_couriers(self) -> list[Courier]:
        self.stdout.write("Creating couriers...")
        User = get_user_model()
        couriers: list[Courier] = []
        for username, name, phone in COURIERS:
            user, created = User.objects.get_or_create(username=username)
            if created:
                user.set_password(f"{username}123")
                user.save(update_fields=["password"])
            courier, _ = Courier.objects.get_or_create(
                user=user, defaults={"name": name, "phone": phone}
            )
            couriers.append(courier)
        self.stdout.write(self.style.SUCCESS("Creating couriers... Done!"))
        return couriers
