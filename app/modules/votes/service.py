from supabase import Client
from postgrest.exceptions import APIError
from app.modules.votes.models import FEATURES_TABLE, FEATURE_UPVOTES_TABLE
from app.modules.votes.schemas import FeatureResponse, VoteResponse
from app.modules.votes.feed import VoteFeed, vote_feed
from collections import Counter
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class DuplicateVoteError(HTTPException):
    def __init__(self, feature_id: str, user_id: str):
        super().__init__(status_code=409, detail="You have already voted for this feature")
        self.feature_id = feature_id
        self.user_id = user_id


def _is_unique_violation(error: Exception) -> bool:
    if isinstance(error, APIError) and error.code == UNIQUE_VIOLATION:
        return True
    return "duplicate key" in str(error).lower()


class VoteService:
    def __init__(self, supabase: Client, feed: Optional[VoteFeed] = None):
        self.supabase = supabase
        self.feed = feed or vote_feed

    def cast_vote(self, feature_id: str, user_id: str) -> VoteResponse:
        """Record one vote for (feature_id, user_id); the table's unique key rejects repeats"""
        try:
            result = self.supabase.table(FEATURE_UPVOTES_TABLE).insert({
                "feature_id": feature_id,
                "user_id": user_id,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to record vote")
        except HTTPException:
            raise
        except Exception as e:
            if _is_unique_violation(e):
                logger.info(f"Duplicate vote by user {user_id} on feature {feature_id}")
                raise DuplicateVoteError(feature_id, user_id)
            logger.error(f"Error voting for feature {feature_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to record vote: {str(e)}")

        self.feed.publish(feature_id, "insert")
        return VoteResponse(**result.data[0])

    def retract_vote(self, feature_id: str, user_id: str) -> bool:
        """Delete the vote for (feature_id, user_id). Returns False if there was none"""
        try:
            result = self.supabase.table(FEATURE_UPVOTES_TABLE)\
                .delete()\
                .eq("feature_id", feature_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error retracting vote on feature {feature_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to retract vote: {str(e)}")

        removed = len(result.data or []) > 0
        if removed:
            self.feed.publish(feature_id, "delete")
        return removed

    def count_votes(self, feature_id: str) -> int:
        try:
            result = self.supabase.table(FEATURE_UPVOTES_TABLE)\
                .select("id", count="exact")\
                .eq("feature_id", feature_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error counting votes for feature {feature_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        if result.count is not None:
            return result.count
        return len(result.data or [])

    def has_voted(self, feature_id: str, user_id: str) -> bool:
        try:
            result = self.supabase.table(FEATURE_UPVOTES_TABLE)\
                .select("id")\
                .eq("feature_id", feature_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error checking vote on feature {feature_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return bool(result.data)

    def list_features(self) -> List[FeatureResponse]:
        """All features with their vote counts, newest first"""
        try:
            features_result = self.supabase.table(FEATURES_TABLE)\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            features = features_result.data or []
            if not features:
                return []

            votes_result = self.supabase.table(FEATURE_UPVOTES_TABLE)\
                .select("feature_id")\
                .in_("feature_id", [f["id"] for f in features])\
                .execute()
            counts = Counter(v["feature_id"] for v in (votes_result.data or []))

            return [FeatureResponse(**f, votes=counts.get(f["id"], 0)) for f in features]
        except Exception as e:
            logger.error(f"Error listing features: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_feature(self, feature_id: str) -> FeatureResponse:
        try:
            result = self.supabase.table(FEATURES_TABLE)\
                .select("*")\
                .eq("id", feature_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Feature not found")
        return FeatureResponse(**result.data, votes=self.count_votes(feature_id))
