from unittest.mock import patch

import pytest
from marshmallow import ValidationError

from workdesk.database.models.ui_preference import DEFAULT_PREFERENCES, UIPreference
from workdesk.schemas.preference_schema import preference_schema


class TestPreferenceSchema:

    def test_rtl_language_sets_direction(self):
        assert preference_schema.load({"language": "ar"}) == {"language": "ar", "layout_direction": "rtl"}
        assert preference_schema.load({"language": "he-IL"})["layout_direction"] == "rtl"

    def test_ltr_language_sets_direction(self):
        assert preference_schema.load({"language": "fr"})["layout_direction"] == "ltr"

    def test_explicit_direction_wins(self):
        assert preference_schema.load({"language": "ar", "layout_direction": "ltr"})["layout_direction"] == "ltr"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            preference_schema.load({"font_size": "huge"})


class TestUIPreferenceModel:

    def test_defaults_overlaid_with_stored_values(self):
        rows = [{"name": "sidebar_expanded", "value": "0"}, {"name": "theme", "value": "dark"}]
        with patch("workdesk.database.models.ui_preference.DBManager.execute_query", return_value=rows):
            prefs = UIPreference.get_for_user("user-1")
        assert prefs == dict(DEFAULT_PREFERENCES, sidebar_expanded=False, theme="dark")

    def test_save_serialises_booleans(self):
        with patch("workdesk.database.models.ui_preference.DBManager.execute_bulk_write_query") as write, \
                patch("workdesk.database.models.ui_preference.DBManager.execute_query", return_value=[]):
            UIPreference.save_for_user("user-1", {"sidebar_expanded": True, "language": "de"})
        params = write.call_args[0][1]
        assert [(p[1], p[2], p[3]) for p in params] == [
            ("user-1", "sidebar_expanded", "1"), ("user-1", "language", "de"),
        ]


class TestPreferenceRoutes:

    def test_get(self, client, login, make_user):
        headers = login(make_user())
        with patch.object(UIPreference, "get_for_user", return_value=dict(DEFAULT_PREFERENCES)):
            response = client.get("/api/preferences", headers=headers)
        assert response.status_code == 200
        assert response.get_json()["data"]["results"] == DEFAULT_PREFERENCES

    def test_put_saves_partial_update(self, client, login, make_user):
        headers = login(make_user())
        saved = dict(DEFAULT_PREFERENCES, language="ar", layout_direction="rtl")
        with patch.object(UIPreference, "save_for_user", return_value=saved) as save:
            response = client.put("/api/preferences", headers=headers, json={"language": "ar"})
        assert response.status_code == 200
        save.assert_called_once_with("user-1", {"language": "ar", "layout_direction": "rtl"})

    def test_put_rejects_bad_theme(self, client, login, make_user):
        headers = login(make_user())
        response = client.put("/api/preferences", headers=headers, json={"theme": "neon"})
        assert response.status_code == 400
        assert "theme" in response.get_json()["error"]["details"]
