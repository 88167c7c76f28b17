# rssfeeds/models.py
from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel

CommunityVisibility = Literal[
    "Public", "LocalOnlyPublic", "LocalOnlyPrivate", "Private", "Unlisted"
]

# Visibilities whose posts may be shown to someone who is not logged in
ANONYMOUS_VISIBILITIES = ("Public", "LocalOnlyPublic", "Unlisted")


# ---------- Site / actors ----------
class SiteView(BaseModel):
    name: str
    description: Optional[str] = None
    instance_id: int
    private_instance: bool = False


class PersonRef(BaseModel):
    id: int
    name: str
    ap_id: str
    bot_account: bool = False


class CommunityRef(BaseModel):
    id: int
    name: str
    title: str
    ap_id: str
    description: Optional[str] = None
    visibility: CommunityVisibility = "Public"
    local: bool = True

    def can_view_without_login(self) -> bool:
        return self.visibility in ANONYMOUS_VISIBILITIES


class LocalUserView(BaseModel):
    local_user_id: int
    person: PersonRef
    show_bot_accounts: bool = True
    banned: bool = False
    deleted: bool = False


# ---------- Content records ----------
class PostView(BaseModel):
    kind: Literal["post"] = "post"
    id: int
    name: str
    url: Optional[str] = None
    url_content_type: Optional[str] = None
    body: Optional[str] = None
    thumbnail_url: Optional[str] = None
    published: datetime
    score: int = 0
    comments: int = 0
    creator: PersonRef
    community: CommunityRef


class CommentReplyView(BaseModel):
    kind: Literal["comment_reply"] = "comment_reply"
    comment_id: int
    content: str
    published: datetime
    creator: PersonRef


class CommentMentionView(BaseModel):
    kind: Literal["comment_mention"] = "comment_mention"
    comment_id: int
    content: str
    published: datetime
    creator: PersonRef


class PostMentionView(BaseModel):
    kind: Literal["post_mention"] = "post_mention"
    post_id: int
    body: Optional[str] = None
    published: datetime
    creator: PersonRef


class PrivateMessageView(BaseModel):
    kind: Literal["private_message"] = "private_message"
    private_message_id: int
    content: str
    published: datetime
    creator: PersonRef


NotificationRecord = Union[
    CommentReplyView, CommentMentionView, PostMentionView, PrivateMessageView
]
ContentRecord = Union[PostView, NotificationRecord]
