"""Application layer: interfaces and the request pipeline."""

from img_optimizer.application.interfaces import (
    CacheStoreInterface,
    ImageFetcherInterface,
    ImageTransformerInterface,
    KeyLockInterface,
    RequestLoggerInterface,
)
from img_optimizer.application.use_cases import OptimizeImageUseCase

__all__ = [
    "CacheStoreInterface",
    "ImageFetcherInterface",
    "ImageTransformerInterface",
    "KeyLockInterface",
    "OptimizeImageUseCase",
    "RequestLoggerInterface",
]
