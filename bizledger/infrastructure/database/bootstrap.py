"""Schema creation and idempotent seeding of reference data"""

import logging

from bizledger.domain.models import AccountType, CategoryType, UserRole
from bizledger.domain.permissions import PERMISSION_DESCRIPTIONS
from bizledger.infrastructure.database.models import Account, Base, Category
from bizledger.infrastructure.database.repositories import PermissionRepository, SettingsRepository, UserRepository
from bizledger.infrastructure.database.session import Database

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS = [
    (1, "Cash", AccountType.CASH),
    (2, "Bank Account", AccountType.BANK),
]

DEFAULT_CATEGORIES = [
    ("Sales", CategoryType.INCOME),
    ("Office Supplies", CategoryType.EXPENSE),
    ("Rent", CategoryType.EXPENSE),
    ("Utilities", CategoryType.EXPENSE),
    ("Salary", CategoryType.EXPENSE),
    ("Other", CategoryType.EXPENSE),
]


def init_database(database: Database, currency: str = "$") -> None:
    """
    Create tables and seed defaults. Safe to run on every start.

    Seeds:
    - the permission catalog (missing names only)
    - Cash (id 1) and Bank Account (id 2) at zero balance, if absent
    - default income/expense categories, only into an empty table
    - the business profile row, with the given currency symbol
    - an 'admin' user with the Admin role when no users exist
    """
    Base.metadata.create_all(bind=database.engine)

    with database.unit_of_work("bootstrap") as session:
        permissions = PermissionRepository(session)
        existing = set(permissions.names())
        for permission, description in PERMISSION_DESCRIPTIONS.items():
            if permission.value not in existing:
                permissions.create(permission.value, description)

        for account_id, name, account_type in DEFAULT_ACCOUNTS:
            if session.get(Account, account_id) is None:
                session.add(
                    Account(id=account_id, name=name, account_type=account_type.value, currency=currency)
                )

        if session.query(Category).count() == 0:
            for name, category_type in DEFAULT_CATEGORIES:
                session.add(Category(name=name, category_type=category_type.value))

        profiles = SettingsRepository(session)
        if profiles.get() is None:
            profiles.create_default(currency)

        users = UserRepository(session)
        if users.count() == 0:
            users.create("admin", UserRole.ADMIN.value)
            logger.info("Created default admin user")

    logger.info("Database ready", extra={"database_url": database.engine.url.render_as_string(hide_password=True)})
