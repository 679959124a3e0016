import json
import os
import redis

client = redis.Redis.from_url(
    os.getenv("REDIS_URL", "redis://localhost:6379"),
    decode_responses=True
)

CACHE_TTL = int(os.getenv("RULES_CACHE_TTL", 300))  # 5 minutes


def _key(name: str) -> str:
    return f"rule_set:{name}:document"


def get_rules_cache(name: str):
    data = client.get(_key(name))
    if data:
        print(f"[Cache] HIT for rule set {name}")
        return json.loads(data)
    print(f"[Cache] MISS for rule set {name}")
    return None


def set_rules_cache(name: str, document: dict):
    client.setex(_key(name), CACHE_TTL, json.dumps(document))
    print(f"[Cache] SET for rule set {name}")


def invalidate_rules_cache(name: str):
    client.delete(_key(name))
    print(f"[Cache] INVALIDATED for rule set {name}")
