from .user import User, UserRole
from .creator import CreatorProfile, CreatorPreferredStyle
from .editor import EditorProfile, EditorTag, Clip, TagType
from .match_request import MatchRequest, MatchStatus, FeedHistory, FeedAction, LIVE_STATUSES
from .chat_message import ChatMessage
