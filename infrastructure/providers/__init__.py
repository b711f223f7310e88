from .base import ProviderDescriptor, SourceClient
from .normalizers import NORMALIZERS
from .registry import build_providers

__all__ = ['ProviderDescriptor', 'SourceClient', 'NORMALIZERS', 'build_providers']
