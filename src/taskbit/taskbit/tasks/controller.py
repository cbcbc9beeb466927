from __future__ import annotations

from flask import Flask, request

from ..common.invalidation import TASK_DELIVERY_GROUPS, TASK_GROUPS
from ..common.listing import ListQuery
from ..common.web import admin_required, current_user, handle_errors, login_required, ok, page_response, request_data
from ..container import Container
from ..core.enums import TaskStatus
from .model import TaskFilter


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard/tasks", endpoint="admin_tasks")
    @admin_required
    @handle_errors
    def admin_tasks():
        query = ListQuery.from_args(request.args, status_enum=TaskStatus)
        page = container.task_service.list_tasks(query, TaskFilter.from_args(request.args))
        return page_response(page)

    @app.route("/dashboard/my-tasks", endpoint="my_tasks")
    @login_required
    @handle_errors
    def my_tasks():
        query = ListQuery.from_args(request.args, status_enum=TaskStatus)
        page = container.task_service.list_user_tasks(
            current_user().user_id,
            query,
            TaskFilter.from_args(request.args),
        )
        return page_response(page)

    @app.route("/api/tasks", methods=["POST"], endpoint="create_task")
    @admin_required
    @handle_errors
    def create_task():
        me = current_user()
        task_id = container.task_service.create_task(
            current_role=me.role, current_user_id=me.user_id, data=request_data()
        )
        return ok("Task created successfully", data={"id": task_id}, invalidate=TASK_GROUPS, status=201)

    @app.route("/api/tasks/calculation", endpoint="task_calculation")
    @admin_required
    @handle_errors
    def task_calculation():
        return ok(data=container.task_service.calculation())

    @app.route("/api/tasks/<int:task_id>", methods=["PUT"], endpoint="update_task")
    @admin_required
    @handle_errors
    def update_task(task_id: int):
        container.task_service.update_task(current_role=current_user().role, task_id=task_id, data=request_data())
        return ok("Task updated successfully", invalidate=TASK_GROUPS)

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="delete_task")
    @admin_required
    @handle_errors
    def delete_task(task_id: int):
        container.task_service.delete_task(current_role=current_user().role, task_id=task_id)
        return ok("Task deleted successfully", invalidate=TASK_GROUPS)

    @app.route("/api/my-tasks/<int:task_id>/delivery", methods=["PUT"], endpoint="task_delivery")
    @login_required
    @handle_errors
    def task_delivery(task_id: int):
        me = current_user()
        container.task_service.update_delivery(
            current_role=me.role, current_user_id=me.user_id, task_id=task_id, data=request_data()
        )
        return ok("Task delivered successfully", invalidate=TASK_DELIVERY_GROUPS)
