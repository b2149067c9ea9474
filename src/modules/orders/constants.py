"""Order and stage status choices plus the order state machine.

Values are stable identifiers; the pt-BR labels are what the shop floor
sees.  The pure scheduling core mirrors these values in
``modules.production.domain``.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    IN_PROGRESS = "IN_PROGRESS", "Em Processo"
    ON_HOLD = "ON_HOLD", "Em Espera"
    DELAYED = "DELAYED", "Atrasado"
    SHIPPED = "SHIPPED", "Enviado"
    COMPLETED = "COMPLETED", "Concluído"
    CANCELLED = "CANCELLED", "Cancelado"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.IN_PROGRESS: {
        OrderStatus.ON_HOLD,
        OrderStatus.DELAYED,
        OrderStatus.SHIPPED,
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.ON_HOLD: {OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED},
    OrderStatus.DELAYED: {
        OrderStatus.IN_PROGRESS,
        OrderStatus.SHIPPED,
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.SHIPPED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}


class StageStatus(models.TextChoices):
    PENDING = "PENDING", "Não Iniciado"
    IN_PROGRESS = "IN_PROGRESS", "Em Andamento"
    COMPLETED = "COMPLETED", "Concluído"


ORDER_NUMBER_MAX_RETRIES = 5
