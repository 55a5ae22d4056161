from models.repos.users_repo import (
    find_account_by_discord_id,
    exists_account_by_discord_id,
    find_account_by_id,
)
from models.repos.auction_repo import (
    parse_auction_id,
    has_unfinished_auction,
    find_round_bids,
    find_due_auctions,
    find_pending_republishes,
)
