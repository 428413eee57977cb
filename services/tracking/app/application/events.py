from fastapi import BackgroundTasks
from app.domain.models import Package, TrackingEvent
from app.infrastructure.cache import ResponseCache, tracking_key
from app.infrastructure.realtime import ConnectionRegistry
from .notifications import NotificationService
from .schemas import PackageRead, TrackingEventRead

class PackageEvents:
    """Side effects of committed package writes.

    Runs as background tasks once the response is sent, so a slow provider
    or a dead socket never affects the write that triggered it.
    """

    def __init__(
        self,
        background_tasks: BackgroundTasks,
        notifier: NotificationService,
        registry: ConnectionRegistry,
        cache: ResponseCache,
    ):
        self.background_tasks = background_tasks
        self.notifier = notifier
        self.registry = registry
        self.cache = cache

    @staticmethod
    def _payload(package: Package, event: TrackingEvent) -> dict:
        return {
            "package": PackageRead.model_validate(package).model_dump(mode="json"),
            "event": TrackingEventRead.model_validate(event).model_dump(mode="json"),
        }

    def created(self, package: Package, event: TrackingEvent) -> None:
        self.background_tasks.add_task(self.notifier.send_package_status_update, package.id, event.status)
        self.background_tasks.add_task(self.registry.broadcast, "packageCreated", self._payload(package, event))

    def status_changed(self, package: Package, event: TrackingEvent) -> None:
        self.cache.delete(tracking_key(package.tracking_id))
        self.background_tasks.add_task(self.notifier.send_package_status_update, package.id, event.status)
        self.background_tasks.add_task(self.registry.broadcast, "packageUpdate", self._payload(package, event))

    def updated(self, package: Package) -> None:
        self.cache.delete(tracking_key(package.tracking_id))

    def reminder_requested(self, package: Package) -> None:
        self.background_tasks.add_task(self.notifier.send_delivery_reminder, package.id)
