from pdv_api.models.tenant import Tenant
from pdv_api.models.profile import Profile
from pdv_api.models.user_role import Role, UserRole
from pdv_api.models.order import Order
from pdv_api.models.receivable import Receivable
from pdv_api.models.company_settings import CompanySettings
from pdv_api.models.catalog import Customer, Product
from pdv_api.models.recovery_token import RecoveryToken
