"""Shared fixtures: an app bound to an in-memory SQLite database."""

import pytest

from voicepath import create_app
from voicepath.config import TestingConfig
from voicepath.extensions import db
from voicepath.tasks import service as task_service

USER_ID = "user-123"


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_task(app):
    """Create a task for ``USER_ID`` and return its id."""

    def _make(name="Write report", importance="high", duration="medium", user_id=USER_ID, subtasks=None,
              description=None):
        with app.app_context():
            task = task_service.create_task(
                user_id,
                {"task_name": name, "importance": importance, "duration": duration, "description": description},
            )
            if subtasks:
                task_service.save_flowchart_subtasks(task, subtasks)
            return task.id

    return _make
