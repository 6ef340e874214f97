"""Integration tests for API endpoints.

These tests verify the webhook and sweep endpoints end-to-end against an
in-memory database and a recording transport.
"""

from datetime import datetime, timedelta

import pytest

from accountabot.models.task import Bucket, Task


def _update(chat_id, text, first_name="Ana", update_id=1):
    return {
        "update_id": update_id,
        "message": {
            "message_id": 10,
            "chat": {"id": int(chat_id), "type": "private"},
            "from": {"id": int(chat_id), "first_name": first_name},
            "text": text,
        },
    }


class TestHealth:
    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestWebhookCommands:
    """Test chat commands."""

    def test_start_with_code_links_chat(self, test_client, settings_repository, fake_transport, test_chat_id, test_user_id):
        response = test_client.post("/telegram/webhook", json=_update(test_chat_id, f"/start {test_user_id}"))

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert settings_repository.get_by_chat_id(test_chat_id).user_id == test_user_id
        assert "Hey Ana!" in fake_transport.texts_for(test_chat_id)[0]

    def test_start_without_code_welcomes(self, test_client, fake_transport, test_chat_id):
        test_client.post("/telegram/webhook", json=_update(test_chat_id, "/start"))
        assert "Welcome" in fake_transport.texts_for(test_chat_id)[0]

    def test_status(self, test_client, linked_settings, fake_transport, test_chat_id):
        test_client.post("/telegram/webhook", json=_update(test_chat_id, "/status"))
        test_client.post("/telegram/webhook", json=_update("777", "/status"))

        assert "connected and active" in fake_transport.texts_for(test_chat_id)[0]
        assert "not connected" in fake_transport.texts_for("777")[0]

    def test_disconnect(self, test_client, settings_repository, linked_settings, fake_transport, test_chat_id):
        test_client.post("/telegram/webhook", json=_update(test_chat_id, "/disconnect"))

        assert settings_repository.get_by_chat_id(test_chat_id) is None
        assert "Disconnected" in fake_transport.texts_for(test_chat_id)[0]

    def test_help_and_unknown_command(self, test_client, fake_transport, test_chat_id):
        test_client.post("/telegram/webhook", json=_update(test_chat_id, "/help"))
        test_client.post("/telegram/webhook", json=_update(test_chat_id, "/dance"))

        help_text, unknown_text = fake_transport.texts_for(test_chat_id)
        assert "Task Creation Help" in help_text
        assert unknown_text == help_text

    def test_command_with_bot_suffix(self, test_client, fake_transport, test_chat_id):
        test_client.post("/telegram/webhook", json=_update(test_chat_id, "/help@accountabot"))
        assert "Task Creation Help" in fake_transport.texts_for(test_chat_id)[0]

    def test_focus_vacation_resume(self, test_client, settings_repository, linked_settings, fake_transport, test_chat_id):
        before = datetime.now()
        test_client.post("/telegram/webhook", json=_update(test_chat_id, "/focus 45"))
        focused = settings_repository.get_by_chat_id(test_chat_id)
        assert focused.focus_until >= before + timedelta(minutes=45)
        assert "Focus mode on" in fake_transport.texts_for(test_chat_id)[-1]

        test_client.post("/telegram/webhook", json=_update(test_chat_id, "/vacation nonsense"))
        away = settings_repository.get_by_chat_id(test_chat_id)
        assert away.vacation_until >= before + timedelta(days=1)

        test_client.post("/telegram/webhook", json=_update(test_chat_id, "/resume"))
        resumed = settings_repository.get_by_chat_id(test_chat_id)
        assert resumed.focus_until is None
        assert resumed.vacation_until is None
        assert "Welcome back" in fake_transport.texts_for(test_chat_id)[-1]

    def test_focus_requires_link(self, test_client, fake_transport, test_chat_id):
        test_client.post("/telegram/webhook", json=_update(test_chat_id, "/focus"))
        assert "Account not connected" in fake_transport.texts_for(test_chat_id)[0]

    def test_settings_row_removed_mid_command(self, test_client, linked_settings, fake_transport, test_chat_id, monkeypatch):
        from accountabot.database.user_settings_repository import UserSettingsRepository

        def vanished(self, settings):
            raise ValueError(f"User settings for {settings.user_id} not found")

        monkeypatch.setattr(UserSettingsRepository, "update", vanished)
        response = test_client.post("/telegram/webhook", json=_update(test_chat_id, "/focus"))

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert "Something went wrong" in fake_transport.texts_for(test_chat_id)[0]


class TestWebhookTaskCreation:
    """Test free-text task creation."""

    def test_creates_task_in_classified_bucket(self, test_client, task_repository, linked_settings, fake_transport, test_chat_id, test_user_id):
        response = test_client.post("/telegram/webhook", json=_update(test_chat_id, "Buy groceries tomorrow #work"))

        assert response.json() == {"ok": True}
        tasks = task_repository.get_all(test_user_id)
        assert len(tasks) == 1
        assert tasks[0].title == "Buy groceries"
        assert tasks[0].bucket == Bucket.THIS_WEEK.value
        assert tasks[0].tags[0].id == "management"
        assert "Task Created!" in fake_transport.texts_for(test_chat_id)[0]

    def test_parse_failure_creates_nothing(self, test_client, task_repository, linked_settings, fake_transport, test_chat_id, test_user_id):
        test_client.post("/telegram/webhook", json=_update(test_chat_id, "hi"))

        assert task_repository.get_all(test_user_id) == []
        assert "Couldn't create task" in fake_transport.texts_for(test_chat_id)[0]

    def test_unlinked_chat(self, test_client, fake_transport, test_chat_id):
        test_client.post("/telegram/webhook", json=_update(test_chat_id, "Buy groceries tomorrow"))
        assert "Account not connected" in fake_transport.texts_for(test_chat_id)[0]

    def test_store_failure_replies_with_database_error(
        self, test_client, linked_settings, fake_transport, test_chat_id, monkeypatch
    ):
        from sqlalchemy.exc import OperationalError
        from accountabot.database.repository import TaskRepository

        def broken_create(self, task):
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(TaskRepository, "create", broken_create)
        response = test_client.post("/telegram/webhook", json=_update(test_chat_id, "Buy groceries tomorrow"))

        assert response.json() == {"ok": True}
        assert "Failed to create task" in fake_transport.texts_for(test_chat_id)[0]

    def test_non_text_update_is_ignored(self, test_client, fake_transport):
        response = test_client.post("/telegram/webhook", json={"update_id": 5})
        assert response.json() == {"ok": True}
        assert fake_transport.sent == []


class TestSweepEndpoints:
    """Test the scheduler-triggered sweeps."""

    def test_process_reminders(self, test_client, task_repository, linked_settings, sample_task_base, fake_transport, test_chat_id):
        now = datetime.now()
        task_repository.create(Task(**{**sample_task_base, "deadline": now - timedelta(minutes=5)}))

        response = test_client.post("/reminders/process")

        assert response.status_code == 200
        data = response.json()
        assert data["processed_user_count"] == 1
        assert data["sent_count"] == 1
        assert data["error_count"] == 0
        assert "timestamp" in data
        assert len(fake_transport.texts_for(test_chat_id)) == 1

    def test_daily_summary(self, test_client, task_repository, linked_settings, sample_task, fake_transport):
        task_repository.create(sample_task)

        response = test_client.post("/reminders/daily-summary")

        assert response.status_code == 200
        assert response.json()["sent_count"] == 1
        assert "Daily Summary" in fake_transport.sent[0][1]

    @pytest.mark.parametrize("path", ["/reminders/process", "/reminders/daily-summary"])
    def test_secret_required_when_configured(self, test_client, monkeypatch, path):
        monkeypatch.setenv("REMINDER_API_KEY", "sweep-secret")

        assert test_client.post(path).status_code == 401
        assert test_client.post(path, headers={"Authorization": "Bearer wrong"}).status_code == 401
        assert test_client.post(path, headers={"Authorization": "Bearer sweep-secret"}).status_code == 200

    def test_missing_transport_is_server_error(self, test_client):
        from accountabot.api.app import app, get_transport

        app.dependency_overrides[get_transport] = lambda: None
        response = test_client.post("/reminders/process")

        assert response.status_code == 500
