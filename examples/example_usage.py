"""Using the service layer without Flask.

Controllers stay thin; the rules live in the services.
"""

import importlib

from config import get_settings_module

from taskbit.common.listing import ListQuery
from taskbit.container import build_container
from taskbit.tasks.model import TaskFilter


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    page = container.task_service.list_tasks(ListQuery(search="demo"), TaskFilter(payment_status="due"))
    print(page.to_dict()["meta"])
    print(container.task_service.calculation())


if __name__ == "__main__":
    main()
