from models.users import User, UserRole
from models.auction import Auction, AuctionCondition, AuctionState, RepublishStep
from models.bid import Bid

__all__ = [
    "User", "UserRole",
    "Auction", "AuctionCondition", "AuctionState", "RepublishStep",
    "Bid",
]
