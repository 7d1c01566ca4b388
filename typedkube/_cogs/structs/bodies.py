"""
All the structures coming from/to the Kubernetes API.

The objects are dicts or dict-like classes: exactly the JSON bodies as sent
to and received from the API server, with a few convenience accessors
for the identity fields (names, namespaces, versions) on top of them.

The Python classes of the objects carry no behaviour of their own.
Their only role is to be a type identity: a class is registered in a scheme
as a specific API group/version/kind (see :mod:`schemes`), so that the client
knows where to send the object without any per-kind code::

    class TypedExample(typedkube.Object):
        pass

    class TypedExampleList(typedkube.ObjectList):
        pass

    scheme.add_known_types('typedkube.dev', 'v1', TypedExample, TypedExampleList)

A plain :class:`Object` is an "unstructured" object: its type identity is
taken from its own ``apiVersion`` & ``kind`` fields.

The client decodes the server's responses into the very same object the caller
has passed, by replacing its content in place. So the server-assigned fields
(e.g. generated names, resource versions, uids) become visible to the caller.
"""
import copy
from typing import Any, Dict, List, Mapping, Optional, cast

from typing_extensions import TypedDict

from typedkube._cogs.structs import references

# Make sure every kwarg has a corresponding same-named type in the root package.
Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    generateName: str
    namespace: str
    labels: Labels
    annotations: Annotations
    finalizers: List[str]
    resourceVersion: str
    deletionTimestamp: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


class RawListMeta(TypedDict, total=False):
    resourceVersion: str
    remainingItemCount: int

    # Cannot be declared as a class field: a Python keyword.
    # continue: str


class RawList(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawListMeta
    items: List[RawBody]


class Object(Dict[str, Any]):
    """
    A single object of any resource kind, as a JSON-like dict.
    """

    @property
    def api_version(self) -> Optional[str]:
        return cast(Optional[str], self.get('apiVersion'))

    @property
    def kind(self) -> Optional[str]:
        return cast(Optional[str], self.get('kind'))

    @property
    def metadata(self) -> Dict[str, Any]:
        return cast(Dict[str, Any], self.setdefault('metadata', {}))

    @property
    def name(self) -> Optional[str]:
        return cast(Optional[str], self.get('metadata', {}).get('name'))

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self._set_meta('name', value)

    @property
    def generate_name(self) -> Optional[str]:
        return cast(Optional[str], self.get('metadata', {}).get('generateName'))

    @generate_name.setter
    def generate_name(self, value: Optional[str]) -> None:
        self._set_meta('generateName', value)

    @property
    def namespace(self) -> references.Namespace:
        return cast(references.Namespace, self.get('metadata', {}).get('namespace'))

    @namespace.setter
    def namespace(self, value: Optional[str]) -> None:
        self._set_meta('namespace', value)

    @property
    def uid(self) -> Optional[str]:
        return cast(Optional[str], self.get('metadata', {}).get('uid'))

    @property
    def resource_version(self) -> Optional[str]:
        return cast(Optional[str], self.get('metadata', {}).get('resourceVersion'))

    @resource_version.setter
    def resource_version(self, value: Optional[str]) -> None:
        self._set_meta('resourceVersion', value)

    @property
    def labels(self) -> Dict[str, str]:
        return cast(Dict[str, str], self.metadata.setdefault('labels', {}))

    @property
    def annotations(self) -> Dict[str, str]:
        return cast(Dict[str, str], self.metadata.setdefault('annotations', {}))

    @property
    def key(self) -> references.ObjectKey:
        return references.ObjectKey(name=self.name or '', namespace=self.namespace)

    def _set_meta(self, field: str, value: Optional[str]) -> None:
        if value is None:
            self.get('metadata', {}).pop(field, None)
        else:
            self.metadata[field] = value

    def snapshot(self) -> Dict[str, Any]:
        """ A deep copy of the current content, e.g. as a base for patches. """
        return copy.deepcopy(dict(self))


class ObjectList(Dict[str, Any]):
    """
    A collection of objects as returned by the listing calls.

    The type identity of a list is its item's kind with the "List" suffix,
    e.g. ``PodList`` for ``Pod`` (as K8s API names them).
    """

    @property
    def api_version(self) -> Optional[str]:
        return cast(Optional[str], self.get('apiVersion'))

    @property
    def kind(self) -> Optional[str]:
        return cast(Optional[str], self.get('kind'))

    # Not `items`: it would shadow the dict's method, which copying & serialization rely on.
    @property
    def objects(self) -> List[Dict[str, Any]]:
        return cast(List[Dict[str, Any]], self.get('items') or [])

    @property
    def resource_version(self) -> Optional[str]:
        return cast(Optional[str], self.get('metadata', {}).get('resourceVersion'))

    @property
    def continue_token(self) -> Optional[str]:
        return cast(Optional[str], self.get('metadata', {}).get('continue')) or None


def replace_content(obj: Dict[str, Any], data: Mapping[str, Any]) -> None:
    """
    Replace the whole content of an object in place, keeping its identity.

    The caller's variable keeps pointing to the same object, but now sees
    the data as returned by the server (including the server-assigned fields).
    """
    obj.clear()
    obj.update(data)
