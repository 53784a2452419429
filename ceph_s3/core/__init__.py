"""Ceph S3 コアモジュール"""
from .credentials import CredentialResolver
from .normalizer import RequestNormalizer
from .s3_client import S3ClientManager, ObjectStoreClient
from .backoff import FibonacciBackoff
from .cancellation import CancellationToken
from .uploader import RetryUploader

__all__ = [
    'CredentialResolver',
    'RequestNormalizer',
    'S3ClientManager',
    'ObjectStoreClient',
    'FibonacciBackoff',
    'CancellationToken',
    'RetryUploader',
]
