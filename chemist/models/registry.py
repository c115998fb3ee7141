# Importing this module registers every table on Base.metadata
# (used by alembic, create_all and the app entry point).

from chemist.models.users import User
from chemist.models.medicines import Medicine
from chemist.models.suppliers import Supplier
from chemist.models.supplied_products import SuppliedProduct
from chemist.models.sales import Sale
from chemist.models.sale_items import SaleItem
from chemist.models.sale_counters import SaleCounter
from chemist.models.admin_settings import AdminSettings

__all__ = [
    "User",
    "Medicine",
    "Supplier",
    "SuppliedProduct",
    "Sale",
    "SaleItem",
    "SaleCounter",
    "AdminSettings",
]
