import pytest

from tuma_cargo.audit.models import AuditLog
from tuma_cargo.cms.services import InvalidSettingsError
from tuma_cargo.cms.services import feature_enabled
from tuma_cargo.cms.services import get_settings_document
from tuma_cargo.cms.services import update_settings


@pytest.mark.django_db
class TestSettingsDocument:
    def test_defaults_without_stored_row(self):
        document = get_settings_document()
        assert document["system"]["currency"] == "USD"
        assert document["features"]["registrationEnabled"] is True
        assert feature_enabled("enableChat")
        assert not feature_enabled("maintenanceMode")

    def test_update_merges_nested_sections(self, super_admin):
        update_settings({"theme": {"primaryColor": "#000000"}}, super_admin)
        row = update_settings(
            {"companyInfo": {"contact": {"phone": "+250788000000"}}},
            super_admin,
        )
        document = get_settings_document(row)
        assert document["theme"]["primaryColor"] == "#000000"
        assert document["theme"]["fontFamily"] == "inter"
        assert document["companyInfo"]["contact"]["phone"] == "+250788000000"
        assert document["companyInfo"]["contact"]["supportHours"] == "Mon-Fri 9AM-6PM EAT"
        assert row.version == 3  # noqa: PLR2004
        assert row.last_updated_by == super_admin

    def test_update_ignores_echoed_metadata(self, super_admin):
        row = update_settings(
            {"version": 99, "updatedAt": "x", "seo": {"keywords": ["cargo"]}},
            super_admin,
        )
        assert row.version == 2  # noqa: PLR2004
        assert set(row.document) == {"seo"}

    def test_advertisements_without_title_are_dropped(self, super_admin):
        row = update_settings(
            {"advertisements": [{"title": "Sale"}, {"title": "  "}, "junk"]},
            super_admin,
        )
        assert row.document["advertisements"] == [{"title": "Sale"}]

    def test_unknown_section(self, super_admin):
        with pytest.raises(InvalidSettingsError, match="Unknown settings sections: bogus"):
            update_settings({"bogus": {}}, super_admin)

    def test_update_is_audited(self, super_admin):
        update_settings({"features": {"enableChat": False}}, super_admin)
        entry = AuditLog.objects.get(action="settings_updated")
        assert entry.message == "sections=features version=2"
        assert not feature_enabled("enableChat")
