"""Business profile shown on invoices"""

from typing import Optional

from bizledger.domain.exceptions import NotFoundError, ValidationError
from bizledger.domain.models import InvoiceTemplate, parse_enum
from bizledger.infrastructure.database.models import BusinessSettings
from bizledger.infrastructure.database.repositories import SettingsRepository
from bizledger.infrastructure.database.session import Database


class BusinessProfileService:
    def __init__(self, database: Database):
        self.database = database

    def get_profile(self) -> BusinessSettings:
        with self.database.unit_of_work("get_business_profile") as session:
            return self._require(SettingsRepository(session))

    def update_profile(
        self,
        business_name: str,
        currency_symbol: str = "$",
        tax_label: str = "Tax",
        template_type: InvoiceTemplate | str = InvoiceTemplate.BASIC,
        **details: Optional[str],
    ) -> BusinessSettings:
        """
        Replace the business profile.

        Name, currency symbol and tax label must be non-blank; the template
        must be one the invoice renderer knows.
        """
        fields = {
            "business_name": _required(business_name, "Business name"),
            "currency_symbol": _required(currency_symbol, "Currency symbol"),
            "tax_label": _required(tax_label, "Tax label"),
            "template_type": parse_enum(InvoiceTemplate, template_type, "invoice template").value,
            **details,
        }
        with self.database.unit_of_work("update_business_profile") as session:
            profiles = SettingsRepository(session)
            return profiles.update(self._require(profiles), **fields)

    @staticmethod
    def _require(profiles: SettingsRepository) -> BusinessSettings:
        profile = profiles.get()
        if profile is None:
            raise NotFoundError("Business profile has not been initialised")
        return profile


def _required(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()
