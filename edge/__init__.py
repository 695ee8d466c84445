"""Edge cache - request/response caching at the network boundary."""

from edge.buckets import Bucket, BucketStore, connect_edge
from edge.channel import SKIP_WAITING, ControlChannel
from edge.interceptor import EdgeCacheInterceptor, InstallError, InterceptorState
from edge.routing import RequestKind, classify, is_local_dev
from edge.transport import EdgeTransport

__all__ = [
    # Storage
    "Bucket",
    "BucketStore",
    "connect_edge",
    # Control
    "ControlChannel",
    "SKIP_WAITING",
    # Interceptor
    "EdgeCacheInterceptor",
    "EdgeTransport",
    "InstallError",
    "InterceptorState",
    # Routing
    "RequestKind",
    "classify",
    "is_local_dev",
]
