import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogcore.core.errors import NotFoundError, ValidationError
from blogcore.models.tag import Tag
from blogcore.models.user import User
from blogcore.schemas.tag_schema import TagDto


def get_all_tags(db: Session) -> list[TagDto]:
    return [TagDto.model_validate(tag) for tag in db.query(Tag).order_by(Tag.name).all()]


def create_tag(db: Session, creator_id: UUID, name: str) -> UUID:
    logging.debug(f"Creating tag {name!r} for user {creator_id}")
    if db.query(User.id).filter(User.id == creator_id).first() is None:
        raise NotFoundError("User not found")

    if db.query(Tag.id).filter(Tag.name == name).first() is not None:
        raise ValidationError("Tag already exists")

    tag = Tag(name=name, creator_id=creator_id)
    try:
        db.add(tag)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Tag already exists")

    logging.info(f"Tag {tag.id} ({name!r}) created")
    return tag.id
