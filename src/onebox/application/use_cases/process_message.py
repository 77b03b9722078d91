"""Per-message pipeline: dedup, normalize, classify, store, notify."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from onebox.application.ports.classifier import EmailClassifier
from onebox.application.ports.email_store import EmailStore
from onebox.application.use_cases.notify_interested import NotifyInterestedUseCase
from onebox.domain.categories import EmailCategory, coerce_category
from onebox.domain.entities.email_document import EmailDocument
from onebox.domain.entities.message_ref import MessageRef
from onebox.domain.identity import email_fingerprint
from onebox.infrastructure.email.normalizer import normalize_message


class ProcessOutcome(str, Enum):
    STORED = "stored"
    SKIPPED_DUPLICATE = "skipped_duplicate"


class ProcessMessageUseCase:
    """Turn one fetched message into a stored, labelled document.

    Flow:
    1. Fingerprint (account, folder, uid) and stop if the store already has it
    2. Fetch the raw source and normalize it
    3. Classify the text; anything outside the label set becomes Unlabelled
    4. Upsert the document
    5. Notify sinks when the label is Interested

    The existence check is advisory; two racing attempts both end in the
    same keyed upsert.
    """

    def __init__(
        self,
        store: EmailStore,
        classifier: EmailClassifier,
        notifier: Optional[NotifyInterestedUseCase] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self.classifier = classifier
        self.notifier = notifier
        self.clock = clock

    def _classify(self, doc: EmailDocument) -> EmailCategory:
        try:
            raw_label = self.classifier.classify(doc.text)
        except Exception as e:
            logger.warning(f"[{doc.account}] Classifier failed for {doc.id}: {e}")
            return EmailCategory.UNLABELLED

        label = coerce_category(raw_label)
        if label is EmailCategory.UNLABELLED and raw_label != EmailCategory.UNLABELLED.value:
            logger.debug(f"[{doc.account}] Unrecognized label {raw_label!r}, using Unlabelled")
        return label

    def process(self, message: MessageRef, account: str, folder: str) -> ProcessOutcome:
        doc_id = email_fingerprint(account, folder, message.uid)

        if self.store.exists(doc_id):
            logger.info(f"[{account}] Skipping already stored UID {message.uid} ({doc_id[:12]})")
            return ProcessOutcome.SKIPPED_DUPLICATE

        doc = normalize_message(
            message.raw_source(),
            message.envelope,
            account=account,
            folder=folder,
            uid=message.uid,
            now=self.clock(),
        )
        doc = doc.with_label(self._classify(doc))

        logger.info(
            f"[{account}] {doc.subject[:50]} -> {doc.label.value} | {doc.text[:100]!r}"
        )

        self.store.upsert(doc)

        if self.notifier is not None:
            self.notifier.notify(doc)

        logger.info(f"[{account}] Stored & tagged UID {message.uid} as {doc.label.value}")
        return ProcessOutcome.STORED
