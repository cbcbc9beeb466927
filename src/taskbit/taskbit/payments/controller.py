from __future__ import annotations

from flask import Flask, request

from ..common.invalidation import PAYMENT_GROUPS
from ..common.listing import ListQuery
from ..common.web import admin_required, current_user, handle_errors, login_required, ok, page_response, request_data
from ..container import Container
from ..core.enums import PaymentStatus, Role


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard/payments", endpoint="admin_payments")
    @admin_required
    @handle_errors
    def admin_payments():
        query = ListQuery.from_args(request.args, status_enum=PaymentStatus)
        return page_response(container.payment_service.list_payments(query))

    @app.route("/dashboard/my-payments", endpoint="my_payments")
    @login_required
    @handle_errors
    def my_payments():
        query = ListQuery.from_args(request.args, status_enum=PaymentStatus)
        return page_response(container.payment_service.list_user_payments(current_user().user_id, query))

    @app.route("/api/payments", methods=["POST"], endpoint="create_payment")
    @admin_required
    @handle_errors
    def create_payment():
        payment_id = container.payment_service.create_payment(current_role=current_user().role, data=request_data())
        return ok("Payment created successfully", data={"id": payment_id}, invalidate=PAYMENT_GROUPS, status=201)

    @app.route("/api/payments/calculation", endpoint="payment_calculation")
    @login_required
    @handle_errors
    def payment_calculation():
        me = current_user()
        if me.role == Role.ADMIN:
            return ok(data=container.payment_service.calculation())
        return ok(data=container.payment_service.calculation(user_id=me.user_id))

    @app.route("/api/payments/<int:payment_id>", methods=["PUT"], endpoint="update_payment")
    @admin_required
    @handle_errors
    def update_payment(payment_id: int):
        container.payment_service.update_payment(
            current_role=current_user().role, payment_id=payment_id, data=request_data()
        )
        return ok("Payment updated successfully", invalidate=PAYMENT_GROUPS)

    @app.route("/api/payments/<int:payment_id>", methods=["DELETE"], endpoint="delete_payment")
    @admin_required
    @handle_errors
    def delete_payment(payment_id: int):
        container.payment_service.delete_payment(current_role=current_user().role, payment_id=payment_id)
        return ok("Payment deleted successfully", invalidate=PAYMENT_GROUPS)
