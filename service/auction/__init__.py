"""경매 시스템"""

from .auction_closer import AuctionCloser, close_due_auctions
from .auction_service import (
    AuctionDetail,
    AuctionDetails,
    AuctionService,
    AuctionSummary,
)
from .bid_validator import BidDecision, BidRejection, validate_bid
from .commission import CommissionPolicy, commission
from .republish import (
    RepublishResult,
    RepublishStatus,
    resume_pending_republishes,
)

__all__ = [
    "AuctionCloser",
    "close_due_auctions",
    "AuctionDetail",
    "AuctionDetails",
    "AuctionService",
    "AuctionSummary",
    "BidDecision",
    "BidRejection",
    "validate_bid",
    "CommissionPolicy",
    "commission",
    "RepublishResult",
    "RepublishStatus",
    "resume_pending_republishes",
]
