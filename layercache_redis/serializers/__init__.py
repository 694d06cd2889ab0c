"""Key and value serializers.

Import concrete serializers from their modules, or reference them by dotted
path (e.g. ``"layercache_redis.serializers.json.JSONSerializer"``).
"""
