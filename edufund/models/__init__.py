# __init__.py
from edufund.models.onboarding import InvestorOnboarding, StudentOnboarding
from edufund.models.profile import UserProfileModel
from edufund.models.proposal import PROPOSAL_STATUSES, Proposal
from edufund.models.schema_meta import SCHEMA_VERSION, SchemaMeta

__all__ = [
	"InvestorOnboarding",
	"StudentOnboarding",
	"UserProfileModel",
	"Proposal",
	"PROPOSAL_STATUSES",
	"SchemaMeta",
	"SCHEMA_VERSION",
]
