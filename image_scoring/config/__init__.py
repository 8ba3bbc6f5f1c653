from .settings import APIConfig, AppSettings, DifySettings, settings

__all__ = ["settings", "AppSettings", "DifySettings", "APIConfig"]
