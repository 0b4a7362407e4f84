"""Sample data: employee, department, phone."""

from datetime import date
from decimal import Decimal

from hquery.executor.environment import Environment

SAMPLE_RESOURCES = ("employee", "department", "phone")


def _employee(
    id: int, name: str, salary: int, department_id: int | None, role: str, hired: date
) -> dict:
    return {
        "id": id,
        "name": name,
        "salary": salary,
        "department_id": department_id,
        "role": role,
        "hired": hired,
    }


def load_sample_data(env: Environment) -> None:
    """Load the sample resources into the environment."""
    env.bind(
        "employee",
        [
            _employee(1, "Alice", 80000, 10, "engineer", date(2015, 3, 1)),
            _employee(2, "Bob", 60000, 10, "manager", date(2017, 7, 7)),
            _employee(3, "Carol", 55000, 20, "engineer", date(2019, 1, 15)),
            _employee(4, "Dave", 90000, 10, "engineer", date(2012, 11, 30)),
            _employee(5, "Eve", 45000, None, "intern", date(2023, 6, 1)),
        ],
    )
    env.bind(
        "department",
        [
            {"id": 10, "name": "Engineering", "budget": Decimal("1500000.00")},
            {"id": 20, "name": "Sales", "budget": Decimal("400000.50")},
            {"id": 30, "name": "Legal", "budget": Decimal("250000.00")},
        ],
    )
    env.bind(
        "phone",
        [
            {"employee_id": 1, "number": "555-1234"},
            {"employee_id": 3, "number": "555-5678"},
            {"employee_id": 3, "number": "555-9999"},
        ],
    )
