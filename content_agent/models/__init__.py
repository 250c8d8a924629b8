from content_agent.models.session import ContentSession, Chart
from content_agent.models.approval import ApprovalRequestRecord

__all__ = [
    "ContentSession",
    "Chart",
    "ApprovalRequestRecord",
]
