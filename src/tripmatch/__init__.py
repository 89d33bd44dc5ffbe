"""TripMatch: hybrid content + item-item collaborative destination recommender."""

from tripmatch.collaborative.scorer import score_collaborative
from tripmatch.collaborative.similarity import SimilarityCache
from tripmatch.feedback.adjuster import adjust_profile
from tripmatch.recommender.rank import rank
from tripmatch.recommender.recommend import recommend
from tripmatch.scoring.content import score_content

__all__ = [
    "SimilarityCache",
    "adjust_profile",
    "rank",
    "recommend",
    "score_collaborative",
    "score_content",
]
