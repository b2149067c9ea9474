from __future__ import annotations

import random
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone
from validate_docbr import CNPJ

from modules.customers.models import Customer, DocumentType
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, CreateStageDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.production.dtos import RegisterAppointmentDTO
from modules.production.repositories.django_repository import AppointmentDjangoRepository
from modules.production.services import AppointmentService

STAGE_TEMPLATES = [
    [("Corte", 1), ("Dobra", 1), ("Solda", 2), ("Pintura", 2), ("Expedição", 1)],
    [("Corte", 2), ("Usinagem", 3), ("Montagem", 2), ("Inspeção", 1)],
    [("Corte", 1), ("Calandragem", 2), ("Solda", 3), ("Jateamento", 1), ("Pintura", 2)],
]

SEED_CUSTOMERS = [
    ("Metalúrgica Horizonte Ltda", "Horizonte", "compras@horizonte.example.com"),
    ("Construtora Vale Verde S.A.", "Vale Verde", "suprimentos@valeverde.example.com"),
    ("Agroindustrial Serra Azul", "Serra Azul", "engenharia@serraazul.example.com"),
    ("Mineração Pedra Alta", "Pedra Alta", "manutencao@pedraalta.example.com"),
    ("Energia Solar do Sul", "Solar Sul", "obras@solarsul.example.com"),
]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        customers = self._seed_customers()
        orders_created, appointments = self._seed_orders(customers)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"customers={len(customers)}, "
                f"orders={orders_created}, "
                f"appointments={appointments}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="pcp").exists():
            User.objects.create_user("pcp", password="pcp12345", is_staff=True)
            created += 1
        if not User.objects.filter(username="operador").exists():
            User.objects.create_user("operador", password="operador123")
            created += 1
        return created

    def _seed_customers(self) -> list[Customer]:
        self.stdout.write("Creating customers...")
        generator = CNPJ()
        customers: list[Customer] = []
        for name, trade_name, email in SEED_CUSTOMERS:
            customer, _ = Customer.objects.get_or_create(
                email=email,
                defaults={
                    "name": name,
                    "trade_name": trade_name,
                    "document": generator.generate(),
                    "document_type": DocumentType.CNPJ,
                    "is_active": True,
                },
            )
            customers.append(customer)
        return customers

    def _seed_orders(self, customers: list[Customer]) -> tuple[int, int]:
        if Order.objects.exists():
            self.stdout.write("Orders already seeded, skipping.")
            return 0, 0

        self.stdout.write("Creating orders and appointments...")
        order_repository = OrderDjangoRepository()
        order_service = OrderService(order_repository, CustomerDjangoRepository())
        appointment_service = AppointmentService(
            order_repository, AppointmentDjangoRepository()
        )

        today = timezone.localdate()
        orders = 0
        appointments = 0
        for index in range(12):
            customer = customers[index % len(customers)]
            start = today - timedelta(days=random.randint(5, 40))
            items = []
            for item_number in range(random.randint(1, 3)):
                template = random.choice(STAGE_TEMPLATES)
                items.append(
                    CreateOrderItemDTO(
                        code=f"PC-{index:02d}{item_number:02d}",
                        description=f"Estrutura metálica {item_number + 1}",
                        quantity=random.randint(1, 20),
                        unit_weight=Decimal(random.randint(50, 2500)) / 10,
                        stages=[
                            CreateStageDTO(name=name, duration_days=days)
                            for name, days in template
                        ],
                    )
                )
            order = order_service.create_order(
                CreateOrderDTO(
                    customer_id=customer.id,
                    internal_os=f"OS-{2000 + index}",
                    project=f"Projeto {index + 1}",
                    start_date=start,
                    delivery_date=start + timedelta(days=random.randint(10, 45)),
                    items=items,
                )
            )
            orders += 1
            appointments += self._report_progress(appointment_service, order, today)
        return orders, appointments

    def _report_progress(self, service: AppointmentService, order: Order, today) -> int:
        """Finish a random prefix of every item's stages, in the past."""
        count = 0
        for item in order.items.all():
            stages = list(item.stages.all())
            for index in range(random.randint(0, len(stages))):
                planned_end = stages[index].planned_end or today
                finished_on = min(planned_end + timedelta(days=random.randint(-1, 2)), today)
                occurred_at = timezone.make_aware(datetime.combine(finished_on, time(16, 0)))
                for action in ("start", "finish"):
                    service.register(
                        RegisterAppointmentDTO(
                            order_id=order.id,
                            item_id=item.id,
                            stage_index=index,
                            action=action,
                            operator={"id": "op-01", "name": "Operador Seed"},
                            occurred_at=occurred_at,
                        )
                    )
                    count += 1
        return count
