"""Tests for modules/profiles/models.py."""

from modules.directory.models import DirectoryUser, DirectoryUserSummary
from modules.profiles.models import (
    ProfileRecord,
    SuggestionRecord,
    partial_profile_from_summary,
    profile_from_directory_user,
)
from tests.conftest import FIXED_NOW, user_payload


class TestProfileMapping:
    def test_full_profile(self):
        """A full payload should map every cached field."""
        user = DirectoryUser.model_validate(user_payload("jdoe"))
        record = profile_from_directory_user(user, refreshed_at=FIXED_NOW)

        assert record.login == "jdoe"
        assert record.display_name == "John Doe"
        assert record.email == "jdoe@student.42.fr"
        assert record.image_url == "https://cdn.intra.42.fr/users/jdoe.jpg"
        assert record.image_small_url == "https://cdn.intra.42.fr/users/small_jdoe.jpg"
        assert record.wallet == 120
        assert record.correction_points == 4
        assert record.cursus_records[0]["cursus"]["slug"] == "42cursus"
        assert record.project_records[0]["final_mark"] == 100
        assert record.last_refreshed_at == FIXED_NOW
        assert record.is_partial is False

    def test_full_profile_without_projects_is_not_partial(self):
        """An empty project list is still a full record."""
        user = DirectoryUser.model_validate(user_payload("jdoe", projects_users=[]))
        record = profile_from_directory_user(user, refreshed_at=FIXED_NOW)
        assert record.project_records == []
        assert record.is_partial is False

    def test_partial_profile(self):
        """List entries carry no details and are marked partial."""
        summary = DirectoryUserSummary.model_validate(user_payload("jdoe", with_details=False))
        record = partial_profile_from_summary(summary, refreshed_at=FIXED_NOW)

        assert record.login == "jdoe"
        assert record.display_name == "John Doe"
        assert record.wallet is None
        assert record.project_records is None
        assert record.is_partial is True

    def test_missing_image(self):
        user = DirectoryUser.model_validate(user_payload("jdoe", image=None))
        record = profile_from_directory_user(user, refreshed_at=FIXED_NOW)
        assert record.image_url is None
        assert record.image_small_url is None


class TestSuggestionRecord:
    def test_prefers_small_image(self):
        record = ProfileRecord(
            login="jdoe", display_name="John Doe", image_url="big", image_small_url="small"
        )
        assert SuggestionRecord.from_profile(record) == SuggestionRecord(
            login="jdoe", display_name="John Doe", image_url="small"
        )

    def test_falls_back_to_full_image(self):
        record = ProfileRecord(login="jdoe", image_url="big")
        assert SuggestionRecord.from_profile(record).image_url == "big"
