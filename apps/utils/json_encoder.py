from __future__ import annotations

from bson import ObjectId
from rest_framework.utils.encoders import JSONEncoder

_original_default = JSONEncoder.default

def _object_id_default(self, obj):
    if isinstance(obj, ObjectId):
        return str(obj)
    return _original_default(self, obj)

JSONEncoder.default = _object_id_default
