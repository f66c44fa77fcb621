# services/review_service.py

import logging
from datetime import datetime, timedelta

from sqlalchemy import select

from models.review import Review
from .errors import ConflictError, ValidationError
from .validators import as_int, sanitize_string

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 1000
REVIEW_WINDOW = timedelta(hours=24)


class ReviewService:

    def __init__(self, session):
        self.session = session

    def list_reviews(self):
        query = select(Review).order_by(Review.created_at.desc(), Review.id.desc())
        return [review.to_dict() for review in self.session.execute(query).scalars().all()]

    def has_recent_review(self, user_id, now=None):
        since = (now or datetime.utcnow()) - REVIEW_WINDOW
        query = select(Review.id).where(Review.user_id == user_id, Review.created_at > since).limit(1)
        return self.session.execute(query).first() is not None

    def submit(self, user_id, payload):
        rating = as_int(payload.get('rating'))
        if rating is None or rating < 1 or rating > 5:
            raise ValidationError("Rating must be an integer between 1 and 5.")

        comment = sanitize_string(payload.get('comment') or '')
        if len(comment) > MAX_COMMENT_LENGTH:
            raise ValidationError("Review comment must be under 1000 characters.")

        if self.has_recent_review(user_id):
            raise ConflictError("You can only submit one review per day.", status_code=429)

        review = Review(user_id=user_id, rating=rating, comment=comment)
        self.session.add(review)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"⭐ Review {review.id} ({rating}/5) from user {user_id}")
        return {'id': review.id, 'rating': rating, 'comment': comment}
