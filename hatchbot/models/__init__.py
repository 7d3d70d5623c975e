from hatchbot.models.cached_result import CachedResult
