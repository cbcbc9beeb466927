"""Taskbit package.

Organized by feature modules (users, tasks, payments, salaries, expenses, dashboard)
with a thin Flask controller layer over service/repository layers.
"""
