"""
Dramatiq worker infrastructure for background analysis runs.

Sets up the Redis broker shared by all worker modules.
"""
import dramatiq
from dramatiq.brokers.redis import RedisBroker

from foodtrigger.config import settings

# Configure Redis broker for Dramatiq
redis_broker = RedisBroker(url=settings.redis_url)
dramatiq.set_broker(redis_broker)
