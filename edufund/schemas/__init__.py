# __init__.py
from edufund.schemas.common import CamelModel, ErrorResponse
from edufund.schemas.profile import (
	Career,
	Education,
	InvestorFields,
	OnboardingResponse,
	OnboardingStatus,
	OnboardingStatusResponse,
	OnboardingSummary,
	PersonalDetails,
	ProfileSections,
	Skills,
	StudentFields,
)
from edufund.schemas.proposal import (
	FinancialInfo,
	FundingGoals,
	PersonalInfo,
	ProposalCreate,
	ProposalListResponse,
	ProposalRead,
	ProposalResponse,
	ProposalStatusUpdate,
	SupportingDocument,
)

__all__ = [
	"CamelModel",
	"ErrorResponse",
	"Career",
	"Education",
	"InvestorFields",
	"OnboardingResponse",
	"OnboardingStatus",
	"OnboardingStatusResponse",
	"OnboardingSummary",
	"PersonalDetails",
	"ProfileSections",
	"Skills",
	"StudentFields",
	"FinancialInfo",
	"FundingGoals",
	"PersonalInfo",
	"ProposalCreate",
	"ProposalListResponse",
	"ProposalRead",
	"ProposalResponse",
	"ProposalStatusUpdate",
	"SupportingDocument",
]
