# sequences/tests/test_concurrency.py

from django.test import TransactionTestCase, skipUnlessDBFeature

from core.testing import make_tenant, run_concurrently
from purchases.models import Requisition
from sequences.models import DocumentSequence, DocumentType
from sequences.services.sequence_service import create_numbered, next_number

WORKERS = 4


@skipUnlessDBFeature("has_select_for_update")
class ConcurrentNumberingTests(TransactionTestCase):
    def setUp(self):
        self.tenant = make_tenant()
        self.tid = self.tenant.id

    def _create_requisition(self):
        doc = create_numbered(
            tenant_id=self.tid,
            document_type=DocumentType.REQUISITION,
            model=Requisition,
            create=lambda number: Requisition.objects.create(tenant_id=self.tid, number=number),
        )
        return doc.number

    def test_first_use_race_creates_one_counter(self):
        numbers = run_concurrently(self._create_requisition, workers=WORKERS)

        self.assertEqual(sorted(numbers), [f"PR-{i:05d}" for i in range(1, WORKERS + 1)])
        self.assertEqual(
            DocumentSequence.objects.filter(tenant=self.tenant, document_type=DocumentType.REQUISITION).count(), 1
        )
        self.assertEqual(Requisition.objects.filter(tenant=self.tenant).count(), WORKERS)

    def test_racing_inserts_get_distinct_numbers(self):
        next_number(tenant_id=self.tid, document_type=DocumentType.REQUISITION)

        numbers = run_concurrently(self._create_requisition, workers=WORKERS)

        self.assertEqual(len(set(numbers)), WORKERS)
        self.assertEqual(sorted(numbers), [f"PR-{i:05d}" for i in range(2, WORKERS + 2)])
        seq = DocumentSequence.objects.get(tenant=self.tenant, document_type=DocumentType.REQUISITION)
        self.assertEqual(seq.next_value, WORKERS + 2)
