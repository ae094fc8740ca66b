from phindex.models.account_model import Account
from phindex.models.profile_model import PersonProfile
from phindex.models.vote_model import Vote
from phindex.models.comment_model import Comment, CommentLike, Notification
from phindex.models.game_result_model import GameResult

__all__ = [
    "Account",
    "PersonProfile",
    "Vote",
    "Comment",
    "CommentLike",
    "Notification",
    "GameResult",
]
