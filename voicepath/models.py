# voicepath/models.py
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict

from voicepath.extensions import db

if TYPE_CHECKING:
    from flask_sqlalchemy.model import Model as _SQLAlchemyModel

    BaseModel = _SQLAlchemyModel
else:
    BaseModel = db.Model


class Task(BaseModel):
    __tablename__ = 'tasks'
    id = db.Column(db.Integer, primary_key=True)
    # Identity comes from the external auth provider (opaque string id)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    task_name = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text)
    importance = db.Column(db.String(16), nullable=False, default='medium')  # low, medium, high
    duration = db.Column(db.String(16), nullable=False, default='medium')  # short, medium, long
    is_complete = db.Column(db.Boolean, default=False, nullable=False)
    has_subtasks = db.Column(db.Boolean, default=False, nullable=False)
    focus_time = db.Column(db.Integer, default=0, nullable=False)  # seconds
    chat_history = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    subtasks = db.relationship(
        'Subtask',
        backref='task',
        cascade='all, delete-orphan',
        order_by='Subtask.order_index',
        lazy='select',
    )

    __table_args__ = (
        db.CheckConstraint("importance IN ('low', 'medium', 'high')", name='ck_task_importance'),
        db.CheckConstraint("duration IN ('short', 'medium', 'long')", name='ck_task_duration'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'task_name': self.task_name,
            'description': self.description,
            'importance': self.importance,
            'duration': self.duration,
            'is_complete': bool(self.is_complete),
            'has_subtasks': bool(self.has_subtasks),
            'focus_time': self.focus_time or 0,
            'chat_history': self.chat_history or [],
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Subtask(BaseModel):
    __tablename__ = 'subtasks'
    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(500), nullable=False)
    completed = db.Column(db.Boolean, default=False, nullable=False)
    order_index = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'task_id': self.task_id,
            'name': self.name,
            'completed': bool(self.completed),
            'order_index': self.order_index,
        }
