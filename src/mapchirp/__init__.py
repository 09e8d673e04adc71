"""Resolve social profile usernames to their stated location, with a TTL cache."""

from mapchirp.cache.location_cache import LocationCache
from mapchirp.extractor import extract
from mapchirp.fetcher import ProfileFetcher
from mapchirp.services.resolution import ResolutionService

__all__ = ["LocationCache", "ProfileFetcher", "ResolutionService", "extract"]
