from hatchbot.schemas.feedback import FeedbackRow
from hatchbot.schemas.search import (
    MetadataSource,
    SearchRequest,
    SearchResponse,
    SearchSources,
    TranscriptSource,
)
from hatchbot.schemas.share import PublishedShare, ShareResponse
