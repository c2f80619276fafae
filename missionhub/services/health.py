"""Health check service for monitoring application components."""
import asyncio
import time
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

import psutil

from missionhub.core.database import DatabaseManager, db_manager
from missionhub.schemas.health import ComponentHealth, HealthCheckResponse
from missionhub.services.realtime_notifier import RealtimeNotifier

APPLICATION_START_TIME = time.time()


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 2)


class HealthCheckService:
    """Checks the database, host resources and the realtime connection registry."""

    def __init__(self, notifier: Optional[RealtimeNotifier] = None, database: DatabaseManager = db_manager):
        self.version = "1.0.0"
        self._notifier = notifier
        self._database = database

    async def check_database(self) -> ComponentHealth:
        start_time = time.time()

        if not self._database.is_initialized:
            return ComponentHealth(
                status="unhealthy",
                message="Database not initialized",
                latency_ms=_elapsed_ms(start_time),
                details={"initialized": False},
            )

        is_connected = await self._database.check_connection()
        return ComponentHealth(
            status="healthy" if is_connected else "unhealthy",
            message="Database connection successful" if is_connected else "Database connection failed",
            latency_ms=_elapsed_ms(start_time),
            details={
                "type": self._database.dialect_name,
                "initialized": True,
                "connected": is_connected,
            },
        )

    async def check_system_resources(self) -> ComponentHealth:
        """Check system resource usage (CPU, memory, disk)."""
        start_time = time.time()

        try:
            cpu_percent = psutil.cpu_percent(interval=0.1)
            memory = psutil.virtual_memory()
            disk = psutil.disk_usage('/')
        except (OSError, psutil.Error) as e:
            return ComponentHealth(
                status="unhealthy",
                message=f"System resource check failed: {str(e)}",
                latency_ms=_elapsed_ms(start_time),
            )

        status = "healthy"
        message = "System resources within normal limits"
        if cpu_percent > 90 or memory.percent > 90 or disk.percent > 90:
            status = "unhealthy"
            message = "System resources critically high"
        elif cpu_percent > 75 or memory.percent > 75 or disk.percent > 85:
            status = "degraded"
            message = "System resources elevated"

        return ComponentHealth(
            status=status,
            message=message,
            latency_ms=_elapsed_ms(start_time),
            details={
                "cpu_percent": round(cpu_percent, 2),
                "memory_percent": round(memory.percent, 2),
                "memory_available_mb": round(memory.available / (1024 * 1024), 2),
                "disk_percent": round(disk.percent, 2),
                "disk_free_gb": round(disk.free / (1024 * 1024 * 1024), 2),
            },
        )

    async def check_realtime(self) -> ComponentHealth:
        start_time = time.time()
        if self._notifier is None:
            return ComponentHealth(
                status="degraded",
                message="Realtime notifier not running",
                latency_ms=_elapsed_ms(start_time),
            )
        return ComponentHealth(
            status="healthy",
            message="Realtime notifier running",
            latency_ms=_elapsed_ms(start_time),
            details={
                "connected_users": await self._notifier.connected_users_count(),
                "heartbeat_seconds": self._notifier.heartbeat_seconds,
            },
        )

    def get_uptime(self) -> float:
        return time.time() - APPLICATION_START_TIME

    async def get_comprehensive_health(self) -> HealthCheckResponse:
        database_health, system_health, realtime_health = await asyncio.gather(
            self.check_database(),
            self.check_system_resources(),
            self.check_realtime(),
        )

        components = {
            "database": database_health,
            "system_resources": system_health,
            "realtime": realtime_health,
        }

        statuses = [comp.status for comp in components.values()]
        if "unhealthy" in statuses:
            overall_status = "unhealthy"
        elif "degraded" in statuses:
            overall_status = "degraded"
        else:
            overall_status = "healthy"

        return HealthCheckResponse(
            status=overall_status,
            timestamp=datetime.now(timezone.utc),
            version=self.version,
            uptime_seconds=round(self.get_uptime(), 2),
            components=components,
        )

    async def check_readiness(self) -> Tuple[bool, Dict[str, bool]]:
        database_health = await self.check_database()
        checks = {
            "configuration_loaded": True,
            "database_connected": database_health.status != "unhealthy",
        }
        return all(checks.values()), checks
