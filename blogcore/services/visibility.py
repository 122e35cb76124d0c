# Single readability rule for listing, fetching and liking posts
from sqlalchemy import false, or_

from blogcore.models.community import Community
from blogcore.models.post import Post
from blogcore.models.user import User


def community_member(user_id):
    """SQL condition on Community: the user is its creator, an admin or a subscriber."""
    if user_id is None:
        return false()
    return or_(
        Community.creator_id == user_id,
        Community.administrators.any(User.id == user_id),
        Community.subscribers.any(User.id == user_id),
    )


def readable_by_user(user_id):
    """Posts outside a community are public; community posts need membership."""
    return or_(
        Post.community_id.is_(None),
        Post.community.has(community_member(user_id)),
    )
