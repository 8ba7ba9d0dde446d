"""Customer, product, employee and category endpoints"""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends

from bizledger.api.dependencies import get_audit_logger, get_directory, require_permission
from bizledger.api.v1.schemas import (
    CategoryRequest,
    CategoryResponse,
    CreatedResponse,
    CustomerRequest,
    CustomerResponse,
    EmployeeRequest,
    EmployeeResponse,
    ProductRequest,
    ProductResponse,
)
from bizledger.domain.permissions import Permission
from bizledger.services.access import Actor
from bizledger.services.audit import AuditLogger
from bizledger.services.directory import DirectoryService

router = APIRouter()

CUSTOMER_DETAILS = ("company", "phone", "email", "address", "tax_id")
EMPLOYEE_DETAILS = ("role", "email", "phone")


# ── Customers ──────────────────────────────────────────────


@router.get("/customers", response_model=List[CustomerResponse])
def list_customers(directory: DirectoryService = Depends(get_directory)):
    return [
        CustomerResponse(id=c.id, name=c.name, **{field: getattr(c, field) for field in CUSTOMER_DETAILS})
        for c in directory.list_customers()
    ]


@router.post("/customers", response_model=CreatedResponse, status_code=201)
def create_customer(
    request_body: CustomerRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_CUSTOMERS)),
    directory: DirectoryService = Depends(get_directory),
    audit: AuditLogger = Depends(get_audit_logger),
):
    customer_id = directory.create_customer(**request_body.model_dump())
    background_tasks.add_task(
        audit.record, actor.user_id, "CREATE", "Customers", customer_id, f"Created customer {request_body.name.strip()}"
    )
    return CreatedResponse(id=customer_id)


@router.put("/customers/{customer_id}", status_code=204)
def update_customer(
    customer_id: int,
    request_body: CustomerRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_CUSTOMERS)),
    directory: DirectoryService = Depends(get_directory),
    audit: AuditLogger = Depends(get_audit_logger),
):
    directory.update_customer(customer_id, **request_body.model_dump())
    background_tasks.add_task(
        audit.record, actor.user_id, "UPDATE", "Customers", customer_id, f"Updated customer {request_body.name.strip()}"
    )


@router.delete("/customers/{customer_id}", status_code=204)
def delete_customer(
    customer_id: int,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_CUSTOMERS)),
    directory: DirectoryService = Depends(get_directory),
    audit: AuditLogger = Depends(get_audit_logger),
):
    directory.delete_customer(customer_id)
    background_tasks.add_task(
        audit.record, actor.user_id, "DELETE", "Customers", customer_id, f"Deleted customer {customer_id}"
    )


# ── Products ───────────────────────────────────────────────


@router.get("/products", response_model=List[ProductResponse])
def list_products(directory: DirectoryService = Depends(get_directory)):
    return [
        ProductResponse(
            id=p.id,
            name=p.name,
            description=p.description,
            unit_price=p.unit_price,
            tax_percent=p.tax_percent,
        )
        for p in directory.list_products()
    ]


@router.post("/products", response_model=CreatedResponse, status_code=201)
def create_product(
    request_body: ProductRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_PRODUCTS)),
    directory: DirectoryService = Depends(get_directory),
    audit: AuditLogger = Depends(get_audit_logger),
):
    product_id = directory.create_product(**request_body.model_dump())
    background_tasks.add_task(
        audit.record, actor.user_id, "CREATE", "Products", product_id, f"Created product {request_body.name.strip()}"
    )
    return CreatedResponse(id=product_id)


@router.put("/products/{product_id}", status_code=204)
def update_product(
    product_id: int,
    request_body: ProductRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_PRODUCTS)),
    directory: DirectoryService = Depends(get_directory),
    audit: AuditLogger = Depends(get_audit_logger),
):
    directory.update_product(product_id, **request_body.model_dump())
    background_tasks.add_task(
        audit.record, actor.user_id, "UPDATE", "Products", product_id, f"Updated product {request_body.name.strip()}"
    )


@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_PRODUCTS)),
    directory: DirectoryService = Depends(get_directory),
    audit: AuditLogger = Depends(get_audit_logger),
):
    directory.delete_product(product_id)
    background_tasks.add_task(
        audit.record, actor.user_id, "DELETE", "Products", product_id, f"Deleted product {product_id}"
    )


# ── Employees ──────────────────────────────────────────────


@router.get("/employees", response_model=List[EmployeeResponse])
def list_employees(directory: DirectoryService = Depends(get_directory)):
    return [
        EmployeeResponse(
            id=e.id,
            name=e.name,
            salary=e.salary,
            allowances=e.allowances,
            **{field: getattr(e, field) for field in EMPLOYEE_DETAILS},
        )
        for e in directory.list_employees()
    ]


@router.post("/employees", response_model=CreatedResponse, status_code=201)
def create_employee(
    request_body: EmployeeRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_PAYROLL)),
    directory: DirectoryService = Depends(get_directory),
    audit: AuditLogger = Depends(get_audit_logger),
):
    employee_id = directory.create_employee(**request_body.model_dump())
    background_tasks.add_task(
        audit.record, actor.user_id, "CREATE", "Employees", employee_id, f"Added employee {request_body.name.strip()}"
    )
    return CreatedResponse(id=employee_id)


@router.put("/employees/{employee_id}", status_code=204)
def update_employee(
    employee_id: int,
    request_body: EmployeeRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_PAYROLL)),
    directory: DirectoryService = Depends(get_directory),
    audit: AuditLogger = Depends(get_audit_logger),
):
    directory.update_employee(employee_id, **request_body.model_dump())
    background_tasks.add_task(
        audit.record, actor.user_id, "UPDATE", "Employees", employee_id, f"Updated employee {request_body.name.strip()}"
    )


# ── Categories ─────────────────────────────────────────────


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(directory: DirectoryService = Depends(get_directory)):
    return [
        CategoryResponse(id=c.id, name=c.name, category_type=c.category_type)
        for c in directory.list_categories()
    ]


@router.post("/categories", response_model=CreatedResponse, status_code=201)
def create_category(
    request_body: CategoryRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_TRANSACTIONS)),
    directory: DirectoryService = Depends(get_directory),
    audit: AuditLogger = Depends(get_audit_logger),
):
    category_id = directory.create_category(request_body.name, request_body.category_type)
    background_tasks.add_task(
        audit.record, actor.user_id, "CREATE", "Categories", category_id, f"Created category {request_body.name.strip()}"
    )
    return CreatedResponse(id=category_id)


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(
    category_id: int,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_TRANSACTIONS)),
    directory: DirectoryService = Depends(get_directory),
    audit: AuditLogger = Depends(get_audit_logger),
):
    directory.delete_category(category_id)
    background_tasks.add_task(
        audit.record, actor.user_id, "DELETE", "Categories", category_id, f"Deleted category {category_id}"
    )
