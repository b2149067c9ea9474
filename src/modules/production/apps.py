from django.apps import AppConfig


class ProductionConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.production"
    label = "production"

    def ready(self) -> None:
        from modules.production.events import StageFinished, StageStarted
        from modules.production.handlers import (
            stage_finished_handler,
            stage_started_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(StageStarted, stage_started_handler)
        event_bus.subscribe(StageFinished, stage_finished_handler)
