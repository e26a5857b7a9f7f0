"""
Core engine: fingerprinting, encoding plans and the push reconciliation.
"""

from bucketpush.core.encoding import EncodingOptions, plan_encodings
from bucketpush.core.options import PushOptions
from bucketpush.core.push import Reconciler, push, push_sync

__all__ = [
    "push",
    "push_sync",
    "Reconciler",
    "PushOptions",
    "EncodingOptions",
    "plan_encodings",
]
