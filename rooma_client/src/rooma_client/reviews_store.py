# src/rooma_client/reviews_store.py

import math
from typing import List

from .optimistic_store import OptimisticStore, StoredEntity

REVIEWS_STORAGE_KEY = "nestquarter_reviews"


class Review(StoredEntity):
    property_id: int
    user_id: int
    user_name: str = ""
    user_initials: str = ""
    rating: int
    comment: str = ""


class ReviewsStore(OptimisticStore[Review]):
    entity_model = Review
    storage_key = REVIEWS_STORAGE_KEY
    id_prefix = "review"

    def get_property_reviews(self, property_id: int) -> List[Review]:
        return self.filter(lambda review: review.property_id == property_id)

    def get_average_rating(self, property_id: int) -> float:
        """Mean rating rounded half-up to one decimal; 0 when the property has no reviews."""
        ratings = [review.rating for review in self.get_property_reviews(property_id)]
        if not ratings:
            return 0
        return math.floor(sum(ratings) / len(ratings) * 10 + 0.5) / 10
