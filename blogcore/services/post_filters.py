# Listing filters, applied in this order after the visibility condition
from sqlalchemy import false

from blogcore.models.post import Post
from blogcore.models.tag import Tag
from blogcore.models.user import User
from blogcore.schemas.post_schema import PostListFilter
from blogcore.services.visibility import community_member, readable_by_user


def _author(post_filter: PostListFilter, viewer_id):
    if not post_filter.author:
        return None
    # Case-sensitive containment; SQLite is switched to case-sensitive LIKE on connect
    return Post.author.has(User.full_name.contains(post_filter.author, autoescape=True))


def _min_reading_time(post_filter: PostListFilter, viewer_id):
    if post_filter.min_reading_time is None:
        return None
    return Post.reading_time >= post_filter.min_reading_time


def _max_reading_time(post_filter: PostListFilter, viewer_id):
    if post_filter.max_reading_time is None:
        return None
    return Post.reading_time <= post_filter.max_reading_time


def _community(post_filter: PostListFilter, viewer_id):
    if post_filter.community_id is None:
        return None
    return Post.community_id == post_filter.community_id


def _only_my_communities(post_filter: PostListFilter, viewer_id):
    if not post_filter.only_my_communities:
        return None
    if viewer_id is None:
        return false()
    return Post.community.has(community_member(viewer_id))


def _tags(post_filter: PostListFilter, viewer_id):
    if not post_filter.tag_ids:
        return None
    # Any one of the requested tags is enough
    return Post.tags.any(Tag.id.in_(list(set(post_filter.tag_ids))))


POST_FILTERS = (
    ("author", _author),
    ("min_reading_time", _min_reading_time),
    ("max_reading_time", _max_reading_time),
    ("community_id", _community),
    ("only_my_communities", _only_my_communities),
    ("tag_ids", _tags),
)


def build_post_conditions(post_filter: PostListFilter, viewer_id) -> list:
    conditions = [readable_by_user(viewer_id)]
    for _, build in POST_FILTERS:
        condition = build(post_filter, viewer_id)
        if condition is not None:
            conditions.append(condition)
    return conditions
