"""Tests for duplicate detection."""

from jobdock.imports.conflict_detectors import EmailDuplicateDetector, get_duplicate_detector


class RecordingStore:
    """Contact store that records lookups."""

    def __init__(self):
        self.lookups = []

    def find_by_email(self, tenant_id, email):
        self.lookups.append((tenant_id, email))
        return None


class TestEmailDuplicateDetector:
    """Tests for email-based duplicate detection."""

    def test_finds_existing_contact(self, contact_store, existing_contact, tenant_id):
        """Test an exact email match returns the stored contact."""
        detector = get_duplicate_detector(contact_store)
        found = detector.find_duplicate(tenant_id, "jane@x.com")

        assert found is not None
        assert found.id == existing_contact.id

    def test_no_match(self, contact_store, existing_contact, tenant_id):
        """Test an unknown email returns None."""
        detector = EmailDuplicateDetector(contact_store)
        assert detector.find_duplicate(tenant_id, "someone@x.com") is None

    def test_scoped_to_tenant(self, contact_store, existing_contact, other_tenant_id):
        """Test contacts of other tenants are not matched."""
        detector = EmailDuplicateDetector(contact_store)
        assert detector.find_duplicate(other_tenant_id, "jane@x.com") is None

    def test_email_trimmed(self, contact_store, existing_contact, tenant_id):
        """Test surrounding whitespace is ignored."""
        detector = EmailDuplicateDetector(contact_store)
        assert detector.find_duplicate(tenant_id, "  jane@x.com ") is not None

    def test_match_is_case_sensitive(self, contact_store, existing_contact, tenant_id):
        """Test emails differing in case are distinct."""
        detector = EmailDuplicateDetector(contact_store)
        assert detector.find_duplicate(tenant_id, "JANE@x.com") is None

    def test_blank_email_never_looked_up(self):
        """Test empty emails skip the store entirely."""
        store = RecordingStore()
        detector = EmailDuplicateDetector(store)

        assert detector.find_duplicate("t1", None) is None
        assert detector.find_duplicate("t1", "") is None
        assert detector.find_duplicate("t1", "   ") is None
        assert store.lookups == []
