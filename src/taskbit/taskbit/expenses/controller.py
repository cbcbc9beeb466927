from __future__ import annotations

from flask import Flask, request

from ..common.invalidation import EXPENSE_GROUPS
from ..common.listing import CalendarFilter, ListQuery
from ..common.web import admin_required, current_user, handle_errors, ok, page_response, request_data
from ..container import Container


def _period(args) -> CalendarFilter:
    return CalendarFilter.from_args(args, month_key="month", year_key="year")


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard/expenses", endpoint="admin_expenses")
    @admin_required
    @handle_errors
    def admin_expenses():
        return page_response(
            container.expense_service.list_expenses(ListQuery.from_args(request.args), _period(request.args))
        )

    @app.route("/api/expenses", methods=["POST"], endpoint="create_expense")
    @admin_required
    @handle_errors
    def create_expense():
        expense_id = container.expense_service.create_expense(current_role=current_user().role, data=request_data())
        return ok("Expense created successfully", data={"id": expense_id}, invalidate=EXPENSE_GROUPS, status=201)

    @app.route("/api/expenses/calculation", endpoint="expense_calculation")
    @admin_required
    @handle_errors
    def expense_calculation():
        totals = container.expense_service.calculation(ListQuery.from_args(request.args), _period(request.args))
        return ok(data=totals)

    @app.route("/api/expenses/<int:expense_id>", methods=["PUT"], endpoint="update_expense")
    @admin_required
    @handle_errors
    def update_expense(expense_id: int):
        container.expense_service.update_expense(
            current_role=current_user().role, expense_id=expense_id, data=request_data()
        )
        return ok("Expense updated successfully", invalidate=EXPENSE_GROUPS)

    @app.route("/api/expenses/<int:expense_id>", methods=["DELETE"], endpoint="delete_expense")
    @admin_required
    @handle_errors
    def delete_expense(expense_id: int):
        container.expense_service.delete_expense(current_role=current_user().role, expense_id=expense_id)
        return ok("Expense deleted successfully", invalidate=EXPENSE_GROUPS)
