from __future__ import annotations

from flask import Flask, request

from ..common.invalidation import salary_groups
from ..common.listing import ListQuery
from ..common.web import admin_required, current_user, handle_errors, login_required, ok, page_response, request_data
from ..container import Container
from ..core.enums import Role, SalaryStatus
from .model import SalaryFilter


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard/salaries", endpoint="admin_salaries")
    @admin_required
    @handle_errors
    def admin_salaries():
        query = ListQuery.from_args(request.args, status_enum=SalaryStatus)
        page = container.salary_service.list_salaries(query, SalaryFilter.from_args(request.args))
        return page_response(page)

    @app.route("/dashboard/my-salaries", endpoint="my_salaries")
    @login_required
    @handle_errors
    def my_salaries():
        query = ListQuery.from_args(request.args, status_enum=SalaryStatus)
        page = container.salary_service.list_salaries(
            query, SalaryFilter.from_args(request.args), user_id=current_user().user_id
        )
        return page_response(page)

    @app.route("/api/salaries", methods=["POST"], endpoint="create_salary")
    @admin_required
    @handle_errors
    def create_salary():
        salary_id = container.salary_service.create_salary(current_role=current_user().role, data=request_data())
        return ok("Salary created successfully", data={"id": salary_id}, invalidate=salary_groups(), status=201)

    @app.route("/api/salaries/calculation", endpoint="salary_calculation")
    @login_required
    @handle_errors
    def salary_calculation():
        me = current_user()
        status = ListQuery.from_args(request.args, status_enum=SalaryStatus).status
        user_id = None if me.role == Role.ADMIN else me.user_id
        return ok(
            data=container.salary_service.calculation(
                SalaryFilter.from_args(request.args), status=status, user_id=user_id
            )
        )

    @app.route("/api/salaries/<int:salary_id>", methods=["PUT"], endpoint="update_salary")
    @admin_required
    @handle_errors
    def update_salary(salary_id: int):
        container.salary_service.update_salary(current_role=current_user().role, salary_id=salary_id, data=request_data())
        return ok("Salary updated successfully", invalidate=salary_groups())

    @app.route("/api/salaries/<int:salary_id>", methods=["DELETE"], endpoint="delete_salary")
    @admin_required
    @handle_errors
    def delete_salary(salary_id: int):
        container.salary_service.delete_salary(current_role=current_user().role, salary_id=salary_id)
        return ok("Salary deleted successfully", invalidate=salary_groups())
