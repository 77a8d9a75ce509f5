"""Cache keys shared by the handlers and the invalidation signals."""


def program_cache_key(program_id: str) -> str:
    return f"programs:{program_id}"
