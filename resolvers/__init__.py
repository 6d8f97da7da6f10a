"""
Resolvers Module
Source resolvers and the video resolution chain
"""
from .base import SourceResolver, TierOutcome, VideoQuery, VideoTier
from .video_chain import (
    CuratedFallbackTier,
    FeedFallbackTier,
    HybridTier,
    PrimaryApiTier,
    VideoResolutionChain,
    VideoResolver,
    build_video_chain,
)
from .web_resolvers import (
    AcademicCourseResolver,
    ArticleResolver,
    BookResolver,
    CertificationResolver,
    GovernmentResolver,
    PodcastResolver,
    WebSearchResolver,
    build_web_resolvers,
)

__all__ = [
    "SourceResolver",
    "TierOutcome",
    "VideoQuery",
    "VideoTier",
    "CuratedFallbackTier",
    "FeedFallbackTier",
    "HybridTier",
    "PrimaryApiTier",
    "VideoResolutionChain",
    "VideoResolver",
    "build_video_chain",
    "AcademicCourseResolver",
    "ArticleResolver",
    "BookResolver",
    "CertificationResolver",
    "GovernmentResolver",
    "PodcastResolver",
    "WebSearchResolver",
    "build_web_resolvers",
]
