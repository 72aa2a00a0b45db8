"""TaskService -- Mutation API

Task / SubTask / Template 的唯一写入口：
1. 校验输入（pydantic），失败抛 TaskValidationError
2. 维护不变量（completed_date <=> completed，updated_at 严格递增，依赖无环）
3. 写入 TaskStore
4. 每次写入都向 ActivityLog 追加对应的 Activity

引用不存在的 task / subtask / attachment / reminder / template 一律抛 NotFoundError 子类。
"""

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError
from ulid import ULID

from ..config import COMMENT_PREVIEW_LENGTH, EngineConfig
from ..dates import Clock, comparable
from ..dependencies import DependencyGraph
from ..exceptions import (
    AttachmentNotFoundError,
    DependencyBlockedError,
    InvariantViolationError,
    ReminderNotFoundError,
    SubTaskNotFoundError,
    TaskNotFoundError,
    TaskValidationError,
    TemplateNotFoundError,
)
from ..models.activity import Activity, Actor
from ..models.enums import (
    STARTED_STATES,
    ActivityType,
    DependencyPolicy,
    EntityType,
    ReminderType,
    SubTaskStatus,
    TaskStatus,
)
from ..models.payloads import (
    AttachmentPayload,
    CommentPayload,
    ReminderSentPayload,
    StatusChangedPayload,
    SubTaskPayload,
    TaskAssignedPayload,
    TaskCreatedPayload,
    TaskDeletedPayload,
    TaskUpdatedPayload,
)
from ..models.task import (
    SubTask,
    SubTaskCreate,
    SubTaskUpdate,
    Task,
    TaskAttachment,
    TaskCreate,
    TaskReminder,
    TaskUpdate,
)
from ..models.template import TaskTemplate, TemplateCreate
from ..store import StoreGroup

log = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)

# 时钟未前进时 updated_at 的最小增量
_TICK = timedelta(microseconds=1)


def _new_id() -> str:
    return str(ULID())


def _coerce(model: type[ModelT], data: ModelT | Mapping[str, Any]) -> ModelT:
    """将 dict 或模型实例转换为指定输入模型，校验失败转为 TaskValidationError"""
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise TaskValidationError(
            f"invalid {model.__name__}: {e.error_count()} error(s)",
            errors=e.errors(include_url=False),
        ) from e


def _validate_task(data: dict[str, Any]) -> Task:
    try:
        return Task.model_validate(data)
    except ValidationError as e:
        raise TaskValidationError(
            f"invalid task: {e.error_count()} error(s)",
            errors=e.errors(include_url=False),
        ) from e


class TaskService:
    """任务写入服务"""

    def __init__(self, store_group: StoreGroup, config: EngineConfig, clock: Clock) -> None:
        self._stores = store_group
        self._config = config
        self._clock = clock

    # ------------------------------------------------------------------
    # Task
    # ------------------------------------------------------------------

    def create_task(
        self,
        data: TaskCreate | Mapping[str, Any],
        actor: Actor | None = None,
    ) -> Task:
        """创建任务

        Args:
            data: TaskCreate 或等价 dict；title 必填且非空
            actor: 操作者，默认系统用户

        Returns:
            新建的 Task

        Raises:
            TaskValidationError: 输入非法（空标题、非法枚举值等）
            InvariantViolationError: 未完成状态却给出 completed_date
            DependencyBlockedError: enforce 策略下以已开始状态创建且依赖未完成
        """
        return self._create(_coerce(TaskCreate, data), self._actor(actor))

    def update_task(
        self,
        task_id: str,
        updates: TaskUpdate | Mapping[str, Any],
        actor: Actor | None = None,
        reason: str = "",
    ) -> Task:
        """合并局部更新

        状态转入 completed 时若未显式给出 completed_date 则设为 now；
        状态离开 completed 时清除 completed_date / completed_by。

        Raises:
            TaskNotFoundError: 任务不存在
            TaskValidationError: 输入非法（含 status="overdue"、task_id 等不可写字段）
            InvariantViolationError: completed_date 与 status 不一致，或依赖成环
            DependencyBlockedError: enforce 策略下依赖未完成
        """
        current = self._require_task(task_id)
        update = _coerce(TaskUpdate, updates)
        actor = self._actor(actor)
        changes = {name: getattr(update, name) for name in update.model_fields_set}
        now = self._clock.now()

        new_status: TaskStatus = changes.get("status") or current.status
        if "status" in changes and changes["status"] is None:
            raise TaskValidationError("status cannot be null")

        if new_status == TaskStatus.COMPLETED:
            if "completed_date" in changes and changes["completed_date"] is None:
                raise InvariantViolationError(
                    "completed task must keep a completed_date"
                )
            if current.status != TaskStatus.COMPLETED:
                changes["completed_date"] = changes.get("completed_date") or now
                changes["completed_by"] = actor.user_id
        else:
            if changes.get("completed_date") is not None:
                raise InvariantViolationError(
                    f"completed_date requires status completed (got {new_status.value})"
                )
            changes["completed_date"] = None
            changes["completed_by"] = None

        tasks = self._stores.task_store.list_tasks()
        if "dependencies" in changes:
            changes["dependencies"] = list(changes["dependencies"] or [])
            graph = DependencyGraph.from_tasks(tasks)
            if graph.would_create_cycle(task_id, changes["dependencies"]):
                raise InvariantViolationError(
                    f"dependencies of task {task_id} would create a cycle"
                )
        if new_status != current.status:
            self._check_dependency_policy(
                task_id,
                changes.get("dependencies", current.dependencies),
                new_status,
                tasks,
            )

        changes["updated_at"] = self._tick(current.updated_at)
        updated = _validate_task({**current.model_dump(), **changes})

        changed_fields = sorted(
            name
            for name in Task.model_fields
            if name != "updated_at" and getattr(updated, name) != getattr(current, name)
        )
        self._stores.task_store.put_task(updated)

        self._record(
            ActivityType.TASK_UPDATED,
            updated,
            actor,
            title=f"Task updated: {updated.title}",
            payload=TaskUpdatedPayload(changed_fields=changed_fields),
        )
        if updated.status != current.status:
            self._record_status_change(current, updated, actor, reason)
        if updated.assigned_user_id != current.assigned_user_id:
            self._record_assignment(updated, actor, from_user_id=current.assigned_user_id)

        log.info(
            "task_updated",
            task_id=task_id,
            changed_fields=changed_fields,
        )
        return updated

    def move_task(
        self,
        task_id: str,
        new_status: TaskStatus | str,
        actor: Actor | None = None,
    ) -> Task | None:
        """看板拖放：状态未变化时为 no-op，返回 None"""
        current = self._require_task(task_id)
        try:
            target = TaskStatus(new_status)
        except ValueError as e:
            raise TaskValidationError(f"invalid status: {new_status}") from e
        if target == current.status:
            log.debug("task_move_noop", task_id=task_id, status=target.value)
            return None
        return self.update_task(task_id, {"status": target}, actor, reason="moved on board")

    def delete_task(self, task_id: str, actor: Actor | None = None) -> Task:
        """删除任务及其子任务、附件、提醒

        Returns:
            被删除的 Task

        Raises:
            TaskNotFoundError: 任务不存在
        """
        removed = self._stores.task_store.delete_task(task_id)
        if removed is None:
            raise TaskNotFoundError(task_id)

        self._record(
            ActivityType.TASK_DELETED,
            removed,
            self._actor(actor),
            title=f"Task deleted: {removed.title}",
            payload=TaskDeletedPayload(
                title=removed.title,
                subtask_count=len(removed.subtasks),
                attachment_count=len(removed.attachments),
                reminder_count=len(removed.reminders),
            ),
        )
        log.info("task_deleted", task_id=task_id)
        return removed

    def duplicate_task(self, task_id: str, actor: Actor | None = None) -> Task:
        """复制任务：新 ID、新时间戳、状态 pending，清除完成信息

        子任务重置为 pending 并生成新 ID；附件与提醒复制为新记录，提醒标记为未发送。
        原任务不受影响。
        """
        source = self._require_task(task_id)
        actor = self._actor(actor)
        now = self._clock.now()
        new_task_id = _new_id()

        copy = source.model_copy(
            deep=True,
            update={
                "task_id": new_task_id,
                "status": TaskStatus.PENDING,
                "created_at": now,
                "updated_at": now,
                "completed_date": None,
                "completed_by": None,
                "actual_duration": None,
                "created_by": actor.user_id,
                "subtasks": [
                    s.model_copy(
                        update={
                            "subtask_id": _new_id(),
                            "parent_task_id": new_task_id,
                            "status": SubTaskStatus.PENDING,
                            "completed_date": None,
                            "created_at": now,
                            "updated_at": now,
                        }
                    )
                    for s in source.subtasks
                ],
                "attachments": [
                    a.model_copy(update={"attachment_id": _new_id(), "task_id": new_task_id})
                    for a in source.attachments
                ],
                "reminders": [
                    r.model_copy(
                        update={
                            "reminder_id": _new_id(),
                            "task_id": new_task_id,
                            "sent": False,
                            "sent_at": None,
                        }
                    )
                    for r in source.reminders
                ],
            },
        )
        copy = _validate_task(copy.model_dump())
        self._stores.task_store.put_task(copy)
        self._record_created(copy, actor, duplicated_from=task_id)
        log.info("task_duplicated", task_id=new_task_id, source_task_id=task_id)
        return copy

    def get_task(self, task_id: str) -> Task:
        return self._require_task(task_id)

    # ------------------------------------------------------------------
    # SubTask
    # ------------------------------------------------------------------

    def add_subtask(
        self,
        task_id: str,
        data: SubTaskCreate | Mapping[str, Any],
        actor: Actor | None = None,
    ) -> SubTask:
        task = self._require_task(task_id)
        now = self._clock.now()
        subtask = self._build_subtask(task_id, _coerce(SubTaskCreate, data), now)
        self._save_children(task, subtasks=[*task.subtasks, subtask])
        self._record_subtask(ActivityType.SUBTASK_ADDED, task, subtask, actor)
        return subtask

    def update_subtask(
        self,
        task_id: str,
        subtask_id: str,
        updates: SubTaskUpdate | Mapping[str, Any],
        actor: Actor | None = None,
    ) -> SubTask:
        """更新子任务；completed_date 规则与 Task 相同"""
        task = self._require_task(task_id)
        current = self._require_subtask(task, subtask_id)
        update = _coerce(SubTaskUpdate, updates)
        changes = {name: getattr(update, name) for name in update.model_fields_set}
        now = self._clock.now()

        new_status = changes.get("status") or current.status
        if new_status == SubTaskStatus.COMPLETED:
            changes["completed_date"] = (
                changes.get("completed_date") or current.completed_date or now
            )
        else:
            if changes.get("completed_date") is not None:
                raise InvariantViolationError(
                    "subtask completed_date requires status completed"
                )
            changes["completed_date"] = None

        changes["updated_at"] = self._tick(current.updated_at)
        try:
            updated = SubTask.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            raise TaskValidationError(
                f"invalid subtask: {e.error_count()} error(s)",
                errors=e.errors(include_url=False),
            ) from e

        changed_fields = sorted(
            name
            for name in SubTask.model_fields
            if name != "updated_at" and getattr(updated, name) != getattr(current, name)
        )
        self._save_children(
            task,
            subtasks=[updated if s.subtask_id == subtask_id else s for s in task.subtasks],
        )
        activity_type = (
            ActivityType.SUBTASK_COMPLETED
            if updated.status == SubTaskStatus.COMPLETED
            and current.status != SubTaskStatus.COMPLETED
            else ActivityType.SUBTASK_UPDATED
        )
        self._record_subtask(activity_type, task, updated, actor, changed_fields)
        return updated

    def complete_subtask(
        self,
        task_id: str,
        subtask_id: str,
        actor: Actor | None = None,
    ) -> SubTask:
        """标记子任务完成，completed_date = now"""
        return self.update_subtask(
            task_id,
            subtask_id,
            {"status": SubTaskStatus.COMPLETED, "completed_date": self._clock.now()},
            actor,
        )

    def delete_subtask(
        self,
        task_id: str,
        subtask_id: str,
        actor: Actor | None = None,
    ) -> SubTask:
        task = self._require_task(task_id)
        subtask = self._require_subtask(task, subtask_id)
        self._save_children(
            task,
            subtasks=[s for s in task.subtasks if s.subtask_id != subtask_id],
        )
        self._record_subtask(ActivityType.SUBTASK_DELETED, task, subtask, actor)
        return subtask

    # ------------------------------------------------------------------
    # Attachment / Reminder / Comment
    # ------------------------------------------------------------------

    def add_attachment(
        self,
        task_id: str,
        filename: str,
        file_url: str,
        file_size: int = 0,
        file_type: str = "application/octet-stream",
        actor: Actor | None = None,
    ) -> TaskAttachment:
        task = self._require_task(task_id)
        actor = self._actor(actor)
        try:
            attachment = TaskAttachment(
                attachment_id=_new_id(),
                task_id=task_id,
                filename=filename,
                file_url=file_url,
                file_size=file_size,
                file_type=file_type,
                uploaded_at=self._clock.now(),
                uploaded_by=actor.user_id,
            )
        except ValidationError as e:
            raise TaskValidationError(
                "invalid attachment",
                errors=e.errors(include_url=False),
            ) from e
        self._save_children(task, attachments=[*task.attachments, attachment])
        self._record(
            ActivityType.FILE_UPLOADED,
            task,
            actor,
            title=f"File uploaded: {filename}",
            payload=AttachmentPayload(
                attachment_id=attachment.attachment_id,
                filename=filename,
                file_size=file_size,
            ),
        )
        return attachment

    def remove_attachment(
        self,
        task_id: str,
        attachment_id: str,
        actor: Actor | None = None,
    ) -> TaskAttachment:
        task = self._require_task(task_id)
        attachment = next(
            (a for a in task.attachments if a.attachment_id == attachment_id),
            None,
        )
        if attachment is None:
            raise AttachmentNotFoundError(attachment_id)
        self._save_children(
            task,
            attachments=[a for a in task.attachments if a.attachment_id != attachment_id],
        )
        self._record(
            ActivityType.TASK_UPDATED,
            task,
            self._actor(actor),
            title=f"Attachment removed: {attachment.filename}",
            payload=TaskUpdatedPayload(changed_fields=["attachments"]),
        )
        return attachment

    def add_reminder(
        self,
        task_id: str,
        reminder_time: datetime,
        type: ReminderType = ReminderType.PUSH,
        message: str | None = None,
        actor: Actor | None = None,
    ) -> TaskReminder:
        task = self._require_task(task_id)
        try:
            reminder = TaskReminder(
                reminder_id=_new_id(),
                task_id=task_id,
                reminder_time=reminder_time,
                type=type,
                message=message,
            )
        except ValidationError as e:
            raise TaskValidationError(
                "invalid reminder",
                errors=e.errors(include_url=False),
            ) from e
        self._save_children(task, reminders=[*task.reminders, reminder])
        self._record(
            ActivityType.TASK_UPDATED,
            task,
            self._actor(actor),
            title=f"Reminder added: {task.title}",
            payload=TaskUpdatedPayload(changed_fields=["reminders"]),
        )
        return reminder

    def remove_reminder(
        self,
        task_id: str,
        reminder_id: str,
        actor: Actor | None = None,
    ) -> TaskReminder:
        task = self._require_task(task_id)
        reminder = self._require_reminder(task, reminder_id)
        self._save_children(
            task,
            reminders=[r for r in task.reminders if r.reminder_id != reminder_id],
        )
        self._record(
            ActivityType.TASK_UPDATED,
            task,
            self._actor(actor),
            title=f"Reminder removed: {task.title}",
            payload=TaskUpdatedPayload(changed_fields=["reminders"]),
        )
        return reminder

    def mark_reminder_sent(
        self,
        task_id: str,
        reminder_id: str,
        actor: Actor | None = None,
    ) -> TaskReminder:
        """外部调度器投递提醒后回写 sent 标记"""
        task = self._require_task(task_id)
        reminder = self._require_reminder(task, reminder_id)
        sent = reminder.model_copy(update={"sent": True, "sent_at": self._clock.now()})
        self._save_children(
            task,
            reminders=[sent if r.reminder_id == reminder_id else r for r in task.reminders],
        )
        self._record(
            ActivityType.REMINDER_SENT,
            task,
            self._actor(actor),
            title=f"Reminder sent: {task.title}",
            payload=ReminderSentPayload(
                reminder_id=reminder_id,
                channel=reminder.type.value,
                reminder_time=reminder.reminder_time.isoformat(),
            ),
        )
        return sent

    def add_comment(self, task_id: str, text: str, actor: Actor | None = None) -> Activity:
        """评论只写 Activity，不修改 Task"""
        task = self._require_task(task_id)
        if not text.strip():
            raise TaskValidationError("comment text cannot be empty")
        return self._record(
            ActivityType.COMMENT_ADDED,
            task,
            self._actor(actor),
            title=f"Comment on: {task.title}",
            description=text,
            payload=CommentPayload(
                text_preview=text[:COMMENT_PREVIEW_LENGTH],
                text_length=len(text),
            ),
        )

    # ------------------------------------------------------------------
    # Template
    # ------------------------------------------------------------------

    def create_template(
        self,
        data: TemplateCreate | Mapping[str, Any],
        actor: Actor | None = None,
    ) -> TaskTemplate:
        payload = _coerce(TemplateCreate, data)
        now = self._clock.now()
        template = TaskTemplate(
            template_id=_new_id(),
            created_at=now,
            updated_at=now,
            created_by=self._actor(actor).user_id,
            **payload.model_dump(),
        )
        self._stores.template_store.put_template(template)
        log.info("template_created", template_id=template.template_id, name=template.name)
        return template

    def get_template(self, template_id: str) -> TaskTemplate:
        template = self._stores.template_store.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def list_templates(self) -> list[TaskTemplate]:
        return self._stores.template_store.list_templates()

    def delete_template(self, template_id: str) -> TaskTemplate:
        removed = self._stores.template_store.delete_template(template_id)
        if removed is None:
            raise TemplateNotFoundError(template_id)
        log.info("template_deleted", template_id=template_id)
        return removed

    def create_task_from_template(
        self,
        template_id: str,
        overrides: Mapping[str, Any] | None = None,
        actor: Actor | None = None,
    ) -> Task:
        """按模板默认值创建任务，应用 overrides，模板 use_count + 1"""
        template = self.get_template(template_id)
        base: dict[str, Any] = {
            "title": template.name,
            "description": template.description,
            "type": template.type,
            "priority": template.priority,
            "estimated_duration": template.estimated_duration,
            "tags": list(template.tags),
            "custom_fields": dict(template.custom_fields),
            "subtasks": [s.model_dump() for s in template.subtasks],
        }
        data = _coerce(TaskCreate, {**base, **dict(overrides or {})})
        task = self._create(data, self._actor(actor), template_id=template_id)

        used = template.model_copy(
            update={
                "use_count": template.use_count + 1,
                "updated_at": self._tick(template.updated_at),
            }
        )
        self._stores.template_store.put_template(used)
        return task

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------

    def log_activity(
        self,
        type: ActivityType,
        title: str,
        entity_type: EntityType,
        entity_id: str,
        actor: Actor | None = None,
        description: str | None = None,
        metadata: Mapping[str, Any] | None = None,
        is_important: bool = False,
        is_private: bool = False,
    ) -> Activity:
        """外部协作方（通话、邮件、会议等）写入 Activity 的入口"""
        actor = self._actor(actor)
        activity = Activity(
            activity_id=_new_id(),
            type=type,
            title=title,
            description=description,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=actor.user_id,
            user_name=actor.user_name,
            metadata=dict(metadata or {}),
            created_at=self._clock.now(),
            is_important=is_important,
            is_private=is_private,
        )
        return self._stores.activity_log.append(activity)

    # ------------------------------------------------------------------
    # 内部辅助
    # ------------------------------------------------------------------

    def _create(
        self,
        data: TaskCreate,
        actor: Actor,
        template_id: str | None = None,
    ) -> Task:
        now = self._clock.now()
        task_id = _new_id()

        completed_date = data.completed_date
        completed_by = None
        if data.status == TaskStatus.COMPLETED:
            completed_date = completed_date or now
            completed_by = actor.user_id
        elif completed_date is not None:
            raise InvariantViolationError(
                f"completed_date requires status completed (got {data.status.value})"
            )

        self._check_dependency_policy(
            task_id,
            data.dependencies,
            data.status,
            self._stores.task_store.list_tasks(),
        )

        fields = data.model_dump(exclude={"subtasks"})
        fields.update(
            task_id=task_id,
            created_at=now,
            updated_at=now,
            completed_date=completed_date,
            completed_by=completed_by,
            created_by=actor.user_id,
            subtasks=[self._build_subtask(task_id, s, now) for s in data.subtasks],
        )
        task = _validate_task(fields)
        self._stores.task_store.put_task(task)

        self._record_created(task, actor, template_id=template_id)
        if task.assigned_user_id:
            self._record_assignment(task, actor, from_user_id=None)

        log.info(
            "task_created",
            task_id=task_id,
            title=task.title,
            status=task.status.value,
            template_id=template_id,
        )
        return task

    def _build_subtask(self, task_id: str, data: SubTaskCreate, now: datetime) -> SubTask:
        return SubTask(
            subtask_id=_new_id(),
            parent_task_id=task_id,
            title=data.title,
            description=data.description,
            status=data.status,
            assigned_user_id=data.assigned_user_id,
            due_date=data.due_date,
            completed_date=now if data.status == SubTaskStatus.COMPLETED else None,
            created_at=now,
            updated_at=now,
        )

    def _save_children(self, task: Task, **collections: list[Any]) -> Task:
        """替换子集合并推进 updated_at"""
        updated = task.model_copy(
            update={**collections, "updated_at": self._tick(task.updated_at)}
        )
        self._stores.task_store.put_task(updated)
        return updated

    def _check_dependency_policy(
        self,
        task_id: str,
        dependencies: list[str],
        target_status: TaskStatus,
        tasks: list[Task],
    ) -> None:
        policy = self._config.dependency_policy
        if policy == DependencyPolicy.IGNORE or target_status not in STARTED_STATES:
            return
        blocking = DependencyGraph.from_tasks(tasks).unfinished(dependencies)
        if not blocking:
            return
        if policy == DependencyPolicy.ENFORCE:
            raise DependencyBlockedError(task_id, blocking)
        log.warning(
            "dependency_blocked",
            task_id=task_id,
            target_status=target_status.value,
            blocking_ids=blocking,
        )

    def _tick(self, previous: datetime) -> datetime:
        """当前时间，且严格晚于 previous"""
        now = self._clock.now()
        current, prior = comparable(now, previous)
        if current <= prior:
            return previous + _TICK
        return now

    def _actor(self, actor: Actor | None) -> Actor:
        if actor is not None:
            return actor
        return Actor(
            user_id=self._config.system_user_id,
            user_name=self._config.system_user_name,
        )

    def _require_task(self, task_id: str) -> Task:
        task = self._stores.task_store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    @staticmethod
    def _require_subtask(task: Task, subtask_id: str) -> SubTask:
        subtask = task.find_subtask(subtask_id)
        if subtask is None:
            raise SubTaskNotFoundError(subtask_id)
        return subtask

    @staticmethod
    def _require_reminder(task: Task, reminder_id: str) -> TaskReminder:
        for reminder in task.reminders:
            if reminder.reminder_id == reminder_id:
                return reminder
        raise ReminderNotFoundError(reminder_id)

    def _record(
        self,
        type: ActivityType,
        task: Task,
        actor: Actor,
        title: str,
        payload: BaseModel,
        description: str | None = None,
        is_important: bool = False,
    ) -> Activity:
        return self.log_activity(
            type,
            title,
            EntityType.TASK,
            task.task_id,
            actor=actor,
            description=description,
            metadata=payload.model_dump(mode="json"),
            is_important=is_important,
        )

    def _record_created(
        self,
        task: Task,
        actor: Actor,
        duplicated_from: str | None = None,
        template_id: str | None = None,
    ) -> None:
        self._record(
            ActivityType.TASK_CREATED,
            task,
            actor,
            title=f"Task created: {task.title}",
            payload=TaskCreatedPayload(
                title=task.title,
                type=task.type,
                priority=task.priority,
                status=task.status,
                duplicated_from=duplicated_from,
                template_id=template_id,
            ),
        )

    def _record_status_change(
        self,
        before: Task,
        after: Task,
        actor: Actor,
        reason: str,
    ) -> None:
        completed = after.status == TaskStatus.COMPLETED
        self._record(
            ActivityType.TASK_COMPLETED if completed else ActivityType.TASK_STATUS_CHANGED,
            after,
            actor,
            title=(
                f"Task completed: {after.title}"
                if completed
                else f"Task moved to {after.status.value}: {after.title}"
            ),
            payload=StatusChangedPayload(
                from_status=before.status,
                to_status=after.status,
                reason=reason,
            ),
            is_important=completed,
        )

    def _record_assignment(
        self,
        task: Task,
        actor: Actor,
        from_user_id: str | None,
    ) -> None:
        self._record(
            ActivityType.TASK_ASSIGNED,
            task,
            actor,
            title=f"Task assigned: {task.title}",
            payload=TaskAssignedPayload(
                from_user_id=from_user_id,
                to_user_id=task.assigned_user_id,
                to_user_name=task.assigned_user_name,
            ),
        )

    def _record_subtask(
        self,
        type: ActivityType,
        task: Task,
        subtask: SubTask,
        actor: Actor | None,
        changed_fields: list[str] | None = None,
    ) -> None:
        self._record(
            type,
            task,
            self._actor(actor),
            title=f"{type.value.replace('_', ' ').capitalize()}: {subtask.title}",
            payload=SubTaskPayload(
                subtask_id=subtask.subtask_id,
                title=subtask.title,
                status=subtask.status,
                changed_fields=changed_fields or [],
            ),
        )
