import logging
from uuid import UUID

from sqlalchemy import exists, func, literal, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from blogcore.core.errors import NotFoundError, ValidationError
from blogcore.models.comment import Comment
from blogcore.models.community import Community
from blogcore.models.post import Post, post_likes
from blogcore.models.tag import Tag
from blogcore.models.user import User
from blogcore.schemas.pagination_schema import PaginationModel
from blogcore.schemas.post_schema import (CreatePostModel, PostDto, PostListFilter,
                                          PostPagedListDto, PostSorting)
from blogcore.schemas.tag_schema import TagDto
from blogcore.services.notifications import outbox
from blogcore.services.post_filters import build_post_conditions
from blogcore.services.visibility import readable_by_user
from blogcore.utils.pagination import paginate, to_pagination_dto
from blogcore.utils.time_utils import utcnow


def _likes_count():
    return (select(func.count())
            .select_from(post_likes)
            .where(post_likes.c.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery())


def _comments_count():
    return (select(func.count(Comment.id))
            .where(Comment.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery())


def _has_like(user_id):
    if user_id is None:
        return literal(False)
    return exists().where(post_likes.c.post_id == Post.id,
                          post_likes.c.user_id == user_id)


_SORT_ORDERS = {
    PostSorting.CREATE_ASC: lambda: (Post.created_at.asc(),),
    PostSorting.CREATE_DESC: lambda: (Post.created_at.desc(),),
    # Ties on likes fall back to creation time so pages don't overlap
    PostSorting.LIKE_ASC: lambda: (_likes_count().asc(), Post.created_at.asc()),
    PostSorting.LIKE_DESC: lambda: (_likes_count().desc(), Post.created_at.desc()),
}


def _sort_order(sorting: PostSorting | None) -> tuple:
    if sorting is None:
        return ()
    try:
        return _SORT_ORDERS[sorting]()
    except KeyError:
        raise ValueError(f"Unsupported post sorting: {sorting!r}")


def _post_rows(db: Session, user_id):
    """Posts together with the aggregates a PostDto needs."""
    return (db.query(Post,
                     _likes_count().label("likes"),
                     _comments_count().label("comments_count"),
                     _has_like(user_id).label("has_like"))
            .options(joinedload(Post.author),
                     joinedload(Post.community),
                     selectinload(Post.tags)))


def _to_post_dto(post: Post, likes: int, comments_count: int, has_like) -> PostDto:
    return PostDto(
        id=post.id,
        create_time=post.created_at,
        title=post.title,
        description=post.description,
        reading_time=post.reading_time,
        image=post.image_url,
        author_id=post.author_id,
        author=post.author.full_name,
        community_id=post.community_id,
        community_name=post.community.name if post.community is not None else None,
        likes=likes,
        has_like=bool(has_like),
        comments_count=comments_count,
        tags=[TagDto.model_validate(tag) for tag in post.tags],
    )


def _check_user_exists(db: Session, user_id: UUID, message: str = "Non-existent user"):
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise NotFoundError(message)


def _check_community_exists(db: Session, community_id: UUID):
    if db.query(Community.id).filter(Community.id == community_id).first() is None:
        raise NotFoundError("Community not found")


def _load_tags(db: Session, tag_ids) -> list[Tag]:
    requested = set(tag_ids)
    tags = db.query(Tag).filter(Tag.id.in_(list(requested))).all()
    if len(tags) != len(requested):
        raise ValidationError("Invalid tag id")
    return tags


def _notify_new_post(notifier, post_id: UUID):
    # Best effort: the post is already committed whatever happens here
    try:
        notifier.notify_subscribers_about_new_post(post_id)
    except Exception as e:
        logging.warning(f"Could not queue new post notification for {post_id}: {e}")


def get_all_posts(db: Session,
                  user_id: UUID | None,
                  post_filter: PostListFilter,
                  sorting: PostSorting | None,
                  pagination: PaginationModel) -> PostPagedListDto:
    logging.debug(f"Listing posts for viewer {user_id}: {post_filter}, sorting={sorting}, {pagination}")
    if user_id is not None:
        _check_user_exists(db, user_id)

    if post_filter.community_id is not None:
        _check_community_exists(db, post_filter.community_id)

    if post_filter.tag_ids:
        _load_tags(db, post_filter.tag_ids)

    conditions = build_post_conditions(post_filter, user_id)
    order_by = _sort_order(sorting)

    total_count = db.query(func.count(Post.id)).filter(*conditions).scalar()

    query = _post_rows(db, user_id).filter(*conditions)
    if order_by:
        query = query.order_by(*order_by)
    rows = paginate(query, pagination).all()

    return PostPagedListDto(
        posts=[_to_post_dto(*row) for row in rows],
        pagination=to_pagination_dto(pagination, total_count),
    )


def get_post(db: Session, post_id: UUID, user_id: UUID | None = None) -> PostDto:
    logging.debug(f"Fetching post {post_id} for viewer {user_id}")
    if user_id is not None:
        _check_user_exists(db, user_id)

    row = (_post_rows(db, user_id)
           .filter(readable_by_user(user_id), Post.id == post_id)
           .first())
    if row is None:
        raise NotFoundError("Post not found")
    return _to_post_dto(*row)


def create_post(db: Session,
                author_id: UUID,
                community_id: UUID | None,
                model: CreatePostModel,
                notifier=None) -> UUID:
    logging.debug(f"Creating post by {author_id} in community {community_id}: {model.title!r}")
    if community_id is not None:
        community = (db.query(Community)
                     .options(selectinload(Community.administrators))
                     .filter(Community.id == community_id)
                     .first())
        if community is None:
            raise NotFoundError("Community not found")
        if not community.can_post(author_id):
            raise NotFoundError("User is not able to post in the community")

    author = db.query(User).filter(User.id == author_id).first()
    if author is None:
        raise NotFoundError("User not found")

    tags = _load_tags(db, model.tags) if model.tags else []

    post = Post(
        author_id=author_id,
        community_id=community_id,
        created_at=utcnow(),
        title=model.title,
        description=model.description,
        reading_time=model.reading_time,
        image_url=model.image,
        address_id=model.address_id,
        tags=tags,
    )
    try:
        db.add(post)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logging.info(f"Post {post.id} created by {author_id}")
    _notify_new_post(notifier if notifier is not None else outbox, post.id)
    return post.id


def _get_liking_target(db: Session, post_id: UUID, user_id: UUID):
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")

    post = (db.query(Post)
            .options(selectinload(Post.liked_by))
            .filter(readable_by_user(user_id), Post.id == post_id)
            .first())
    if post is None:
        raise NotFoundError("Post not found")
    return user, post


def like_post(db: Session, post_id: UUID, user_id: UUID) -> None:
    logging.debug(f"User {user_id} likes post {post_id}")
    user, post = _get_liking_target(db, post_id, user_id)

    if user in post.liked_by:
        raise ValidationError("User already liked this post.")

    post.liked_by.append(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent like by the same user got there first
        db.rollback()
        raise ValidationError("User already liked this post.")
    logging.info(f"User {user_id} liked post {post_id}")


def dislike_post(db: Session, post_id: UUID, user_id: UUID) -> None:
    logging.debug(f"User {user_id} removes like from post {post_id}")
    user, post = _get_liking_target(db, post_id, user_id)

    if user not in post.liked_by:
        raise ValidationError("User did not like this post.")

    post.liked_by.remove(user)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logging.info(f"User {user_id} disliked post {post_id}")
