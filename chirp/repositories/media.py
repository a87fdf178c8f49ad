"""Media rows."""
from typing import List, Optional

from sqlalchemy.orm import Session

from chirp.models import Media


def create(
    db: Session,
    post_id: str,
    file_path: str,
    file_name: str,
    file_type: str,
    file_size: int,
    position: int,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> Media:
    media = Media(
        post_id=post_id,
        file_path=file_path,
        file_name=file_name,
        file_type=file_type,
        file_size=file_size,
        width=width,
        height=height,
        position=position,
    )
    db.add(media)
    db.flush()
    return media


def get_by_post(db: Session, post_id: str) -> List[Media]:
    return db.query(Media).filter(Media.post_id == post_id).order_by(Media.position).all()
