# Import models here so Base.metadata knows every table.
from carbon_api.models.user import User  # noqa: F401

# Organizations, memberships, hierarchy
from carbon_api.models.organization_account import OrganizationAccount, OrganizationAccountChild  # noqa: F401
from carbon_api.models.organization_membership import OrganizationMembership  # noqa: F401

# Starter wizard + calculation results
from carbon_api.models.starter_entry import StarterEntry  # noqa: F401
from carbon_api.models.calculated_impact import CalculatedImpact  # noqa: F401
