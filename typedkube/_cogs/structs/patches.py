"""
All the structures needed for Kubernetes patching.

A patch is a pair of a patch type (it goes to the ``Content-Type`` header)
and a function to produce the patch payload from the current object.
The payload is produced right before the request, from the object's state
as it is at that moment, i.e. before the response is decoded into it.

The typical usage is to take a snapshot of the object, modify the object,
and send the difference between the snapshot and the modified object::

    patch = typedkube.MergeFrom(pod)
    pod.labels['x'] = 'y'
    await client.patch(pod, patch)

Merge-patches (RFC 7386) are simple dictionaries with field overrides,
and ``None`` for field deletions. JSON-patches (RFC 6902) are lists
of operations with paths (RFC 6901).
"""
import collections.abc
import copy
import enum
import json
from typing import Any, Dict, List, Mapping, Optional, Union

from typing_extensions import Literal, Protocol, TypedDict

JSONPatchOp = Literal["add", "replace", "remove"]


def _escaped_path(keys: List[str]) -> str:
    """Provides an appropriately escaped path for JSON Patches.

    See https://datatracker.ietf.org/doc/html/rfc6901#section-3 for more details.
    """
    return '/'.join(map(lambda key: key.replace('~', '~0').replace('/', '~1'), keys))


class JSONPatchItem(TypedDict, total=False):
    op: JSONPatchOp
    path: str
    value: Optional[Any]


JSONPatch = List[JSONPatchItem]


class PatchType(str, enum.Enum):
    JSON = 'application/json-patch+json'
    MERGE = 'application/merge-patch+json'
    STRATEGIC_MERGE = 'application/strategic-merge-patch+json'
    APPLY = 'application/apply-patch+yaml'


class Patch(Protocol):

    @property
    def type(self) -> PatchType: ...

    def data(self, obj: Mapping[str, Any]) -> bytes: ...


class RawPatch:
    """ A pre-rendered patch: the same payload regardless of the object. """

    def __init__(self, type: PatchType, data: Union[bytes, str, Mapping[str, Any], JSONPatch]) -> None:
        super().__init__()
        self._type = PatchType(type)
        self._data = data

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self._type.name}, {self._data!r})'

    @property
    def type(self) -> PatchType:
        return self._type

    def data(self, obj: Mapping[str, Any]) -> bytes:
        if isinstance(self._data, bytes):
            return self._data
        elif isinstance(self._data, str):
            return self._data.encode('utf-8')
        else:
            return json.dumps(self._data).encode('utf-8')


class MergeFrom:
    """
    A JSON merge-patch (RFC 7386) from a snapshot of the original object.

    The snapshot is taken at construction; the difference is calculated
    against the object's state at the time of patching.
    """

    def __init__(self, original: Mapping[str, Any]) -> None:
        super().__init__()
        self._original = copy.deepcopy(dict(original))

    @property
    def type(self) -> PatchType:
        return PatchType.MERGE

    def data(self, obj: Mapping[str, Any]) -> bytes:
        return json.dumps(diff_as_merge_patch(self._original, obj)).encode('utf-8')


class JSONPatchFrom(MergeFrom):
    """
    A JSON-patch (RFC 6902) from a snapshot of the original object.

    Lists are replaced as a whole, the same as in merge-patches.
    """

    @property
    def type(self) -> PatchType:
        return PatchType.JSON

    def data(self, obj: Mapping[str, Any]) -> bytes:
        return json.dumps(diff_as_json_patch(self._original, obj)).encode('utf-8')


class ApplyPatch:
    """
    A server-side apply: the whole object as the desired state of its fields.

    Requires a field manager: see :func:`typedkube.field_owner`.
    The client adds the apiVersion & kind if the object has none.
    """

    @property
    def type(self) -> PatchType:
        return PatchType.APPLY

    def data(self, obj: Mapping[str, Any]) -> bytes:
        # JSON is a subset of YAML, so the API accepts it as is.
        return json.dumps(obj).encode('utf-8')


def diff_as_merge_patch(old: Mapping[str, Any], new: Mapping[str, Any]) -> Dict[str, Any]:
    patch: Dict[str, Any] = {}
    for key in old:
        if key not in new:
            patch[key] = None
    for key, val in new.items():
        if key not in old:
            patch[key] = val
        elif isinstance(val, collections.abc.Mapping) and isinstance(old[key], collections.abc.Mapping):
            subpatch = diff_as_merge_patch(old[key], val)
            if subpatch:
                patch[key] = subpatch
        elif val != old[key]:
            patch[key] = val
    return patch


def diff_as_json_patch(old: Mapping[str, Any], new: Mapping[str, Any]) -> JSONPatch:
    return _diff_as_json_patch(old, new, keys=[''])


def _diff_as_json_patch(old: Mapping[str, Any], new: Mapping[str, Any], keys: List[str]) -> JSONPatch:
    result: JSONPatch = []
    for key in old:
        if key not in new:
            result.append(JSONPatchItem(op='remove', path=_escaped_path(keys + [key])))
    for key, val in new.items():
        if key not in old:
            result.append(JSONPatchItem(op='add', path=_escaped_path(keys + [key]), value=val))
        elif isinstance(val, collections.abc.Mapping) and isinstance(old[key], collections.abc.Mapping):
            result.extend(_diff_as_json_patch(old[key], val, keys + [key]))
        elif val != old[key]:
            result.append(JSONPatchItem(op='replace', path=_escaped_path(keys + [key]), value=val))
    return result
