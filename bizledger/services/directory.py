"""Master data: customers, products, employees and categories"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from bizledger.domain.exceptions import NotFoundError, ValidationError
from bizledger.domain.models import CategoryType, parse_enum
from bizledger.domain.money import require_non_negative, require_percent
from bizledger.infrastructure.database.models import Category, Customer, Employee, Product
from bizledger.infrastructure.database.repositories import (
    CategoryRepository,
    CustomerRepository,
    EmployeeRepository,
    ProductRepository,
)
from bizledger.infrastructure.database.session import Database


def _require_name(name: Optional[str], label: str) -> str:
    if name is None or not name.strip():
        raise ValidationError(f"{label} name is required")
    return name.strip()


class DirectoryService:
    """CRUD for the records invoices and payroll refer to"""

    def __init__(self, database: Database):
        self.database = database

    # ── Customers ──────────────────────────────────────────

    def list_customers(self) -> List[Customer]:
        with self.database.unit_of_work("list_customers") as session:
            return CustomerRepository(session).list()

    def create_customer(self, name: str, **details: Optional[str]) -> int:
        fields = {"name": _require_name(name, "Customer"), **details}
        with self.database.unit_of_work("create_customer") as session:
            return CustomerRepository(session).create(**fields).id

    def update_customer(self, customer_id: int, name: str, **details: Optional[str]) -> None:
        fields = {"name": _require_name(name, "Customer"), **details}
        with self.database.unit_of_work("update_customer") as session:
            customers = CustomerRepository(session)
            customers.update(self._require(customers, customer_id, "Customer"), **fields)

    def delete_customer(self, customer_id: int) -> None:
        """Customers referenced by invoices cannot be deleted (PersistenceError)"""
        with self.database.unit_of_work("delete_customer") as session:
            customers = CustomerRepository(session)
            customers.delete(self._require(customers, customer_id, "Customer"))

    # ── Products ───────────────────────────────────────────

    def list_products(self) -> List[Product]:
        with self.database.unit_of_work("list_products") as session:
            return ProductRepository(session).list()

    def create_product(
        self,
        name: str,
        unit_price: Decimal,
        tax_percent: Decimal = Decimal("0"),
        description: Optional[str] = None,
    ) -> int:
        fields = self._product_fields(name, unit_price, tax_percent, description)
        with self.database.unit_of_work("create_product") as session:
            return ProductRepository(session).create(**fields).id

    def update_product(
        self,
        product_id: int,
        name: str,
        unit_price: Decimal,
        tax_percent: Decimal = Decimal("0"),
        description: Optional[str] = None,
    ) -> None:
        fields = self._product_fields(name, unit_price, tax_percent, description)
        with self.database.unit_of_work("update_product") as session:
            products = ProductRepository(session)
            products.update(self._require(products, product_id, "Product"), **fields)

    def delete_product(self, product_id: int) -> None:
        with self.database.unit_of_work("delete_product") as session:
            products = ProductRepository(session)
            products.delete(self._require(products, product_id, "Product"))

    # ── Employees ──────────────────────────────────────────

    def list_employees(self) -> List[Employee]:
        with self.database.unit_of_work("list_employees") as session:
            return EmployeeRepository(session).list()

    def create_employee(
        self,
        name: str,
        salary: Decimal = Decimal("0"),
        allowances: Decimal = Decimal("0"),
        **details: Optional[str],
    ) -> int:
        fields = self._employee_fields(name, salary, allowances, details)
        with self.database.unit_of_work("create_employee") as session:
            return EmployeeRepository(session).create(**fields).id

    def update_employee(
        self,
        employee_id: int,
        name: str,
        salary: Decimal = Decimal("0"),
        allowances: Decimal = Decimal("0"),
        **details: Optional[str],
    ) -> None:
        fields = self._employee_fields(name, salary, allowances, details)
        with self.database.unit_of_work("update_employee") as session:
            employees = EmployeeRepository(session)
            employees.update(self._require(employees, employee_id, "Employee"), **fields)

    # ── Categories ─────────────────────────────────────────

    def list_categories(self) -> List[Category]:
        with self.database.unit_of_work("list_categories") as session:
            return CategoryRepository(session).list()

    def create_category(self, name: str, category_type: CategoryType | str) -> int:
        kind = parse_enum(CategoryType, category_type, "category type")
        fields = {"name": _require_name(name, "Category"), "category_type": kind.value}
        with self.database.unit_of_work("create_category") as session:
            return CategoryRepository(session).create(**fields).id

    def delete_category(self, category_id: int) -> None:
        with self.database.unit_of_work("delete_category") as session:
            categories = CategoryRepository(session)
            categories.delete(self._require(categories, category_id, "Category"))

    # ── Helpers ────────────────────────────────────────────

    @staticmethod
    def _require(repository, record_id: int, label: str):
        record = repository.get(record_id)
        if record is None:
            raise NotFoundError(f"{label} {record_id} not found")
        return record

    @staticmethod
    def _product_fields(name, unit_price, tax_percent, description) -> Dict[str, Any]:
        return {
            "name": _require_name(name, "Product"),
            "unit_price": require_non_negative(unit_price, "unit price"),
            "tax_percent": require_percent(tax_percent, "tax percent"),
            "description": description,
        }

    @staticmethod
    def _employee_fields(name, salary, allowances, details) -> Dict[str, Any]:
        return {
            "name": _require_name(name, "Employee"),
            "salary": require_non_negative(salary, "salary"),
            "allowances": require_non_negative(allowances, "allowances"),
            **details,
        }
