"""Use cases of the ingestion pipeline."""

from onebox.application.use_cases.notify_interested import NotificationResult, NotifyInterestedUseCase
from onebox.application.use_cases.process_message import ProcessMessageUseCase, ProcessOutcome
from onebox.application.use_cases.sync_account import AccountSyncDriver, SyncStats

__all__ = [
    "AccountSyncDriver",
    "NotificationResult",
    "NotifyInterestedUseCase",
    "ProcessMessageUseCase",
    "ProcessOutcome",
    "SyncStats",
]
