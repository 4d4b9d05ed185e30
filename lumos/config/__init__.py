from lumos.config.settings import settings

__all__ = ["settings"]
