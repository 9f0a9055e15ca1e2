from .normalize import normalize_candles

__all__ = ["normalize_candles"]
