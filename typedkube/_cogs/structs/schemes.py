"""
A registry of Python classes as K8s kinds (a "scheme").

The scheme answers one question: which API group, version & kind an object is.
It knows nothing about how those kinds are served by the API server
(e.g. their plural names, or whether they are namespaced): that comes
from discovery (see :mod:`typedkube._cogs.clients.mapping`).

The registrations are static: classes are registered once at import time
and never change afterwards. However, the scheme is not a hidden global:
every client gets its scheme injected, so tests can use a fresh one each.
"""
from typing import Any, Dict, Mapping, Type

from typedkube._cogs.clients import errors
from typedkube._cogs.structs import bodies, references


class Scheme:

    def __init__(self) -> None:
        super().__init__()
        self._type_to_gvk: Dict[type, references.GroupVersionKind] = {}
        self._gvk_to_type: Dict[references.GroupVersionKind, type] = {}

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {len(self._type_to_gvk)} types>'

    def __contains__(self, cls: object) -> bool:
        return cls in self._type_to_gvk

    def add_known_type(self, gvk: references.GroupVersionKind, cls: type) -> None:
        known = self._type_to_gvk.get(cls)
        if known is not None and known != gvk:
            raise ValueError(f"{cls.__name__} is already registered as {known}, not as {gvk}.")
        self._type_to_gvk[cls] = gvk
        self._gvk_to_type.setdefault(gvk, cls)

    def add_known_types(self, group: str, version: str, *classes: type) -> None:
        """ Register the classes by their names as kinds, e.g. ``Pod`` as kind "Pod". """
        for cls in classes:
            self.add_known_type(references.GroupVersionKind(group, version, cls.__name__), cls)

    def known_types(self) -> Mapping[references.GroupVersionKind, type]:
        return dict(self._gvk_to_type)

    def object_kind(self, obj: Any) -> references.GroupVersionKind:
        """
        Identify the object's kind: either by its class, or by its own fields.

        The registered classes are identified by the classes only, regardless
        of what is in their bodies. The unstructured objects (plain :class:`Object`,
        :class:`ObjectList`, or dicts) must declare ``apiVersion`` & ``kind``.
        """
        gvk = self._type_to_gvk.get(type(obj))
        if gvk is not None:
            return gvk

        if isinstance(obj, Mapping):
            api_version = obj.get('apiVersion')
            kind = obj.get('kind')
            if api_version and kind:
                return references.GroupVersionKind.parse(api_version, kind)

        raise errors.TypeNotRegisteredError(
            f"{type(obj).__name__} is not registered in the scheme, "
            f"and has no apiVersion/kind of its own.")

    def is_list(self, obj: Any) -> bool:
        return isinstance(obj, bodies.ObjectList) or (
            isinstance(obj, Mapping) and not isinstance(obj, bodies.Object) and 'items' in obj)

    def new(self, gvk: references.GroupVersionKind) -> Dict[str, Any]:
        """ Instantiate an empty object of a kind, either registered or unstructured. """
        cls: Type[Dict[str, Any]]
        if gvk in self._gvk_to_type:
            cls = self._gvk_to_type[gvk]
        elif gvk.kind.endswith('List'):
            cls = bodies.ObjectList
        else:
            cls = bodies.Object
        return cls(apiVersion=gvk.api_version, kind=gvk.kind)


#
# Some commonly used built-in kinds, mostly for convenience & examples.
# Any other kinds can be added to this or to other schemes by the users.
#

class Namespace(bodies.Object):
    pass


class NamespaceList(bodies.ObjectList):
    pass


class Node(bodies.Object):
    pass


class NodeList(bodies.ObjectList):
    pass


class Pod(bodies.Object):
    pass


class PodList(bodies.ObjectList):
    pass


class ConfigMap(bodies.Object):
    pass


class ConfigMapList(bodies.ObjectList):
    pass


class Secret(bodies.Object):
    pass


class SecretList(bodies.ObjectList):
    pass


class Service(bodies.Object):
    pass


class ServiceList(bodies.ObjectList):
    pass


class Deployment(bodies.Object):
    pass


class DeploymentList(bodies.ObjectList):
    pass


def make_default_scheme() -> Scheme:
    scheme = Scheme()
    scheme.add_known_types('', 'v1',
                           Namespace, NamespaceList,
                           Node, NodeList,
                           Pod, PodList,
                           ConfigMap, ConfigMapList,
                           Secret, SecretList,
                           Service, ServiceList)
    scheme.add_known_types('apps', 'v1',
                           Deployment, DeploymentList)
    return scheme
