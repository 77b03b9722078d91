"""Application layer - ingestion use cases and account supervision."""

from onebox.application.supervisor import AccountHealth, AccountSupervisor, HealthStatus, RestartPolicy
from onebox.application.use_cases import (
    AccountSyncDriver,
    NotifyInterestedUseCase,
    ProcessMessageUseCase,
    ProcessOutcome,
)

__all__ = [
    "AccountHealth",
    "AccountSupervisor",
    "AccountSyncDriver",
    "HealthStatus",
    "NotifyInterestedUseCase",
    "ProcessMessageUseCase",
    "ProcessOutcome",
    "RestartPolicy",
]
